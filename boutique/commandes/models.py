from typing import Any, Dict


class OrderResult:
    """Résultat de la matérialisation d'une commande (identifiant + total figé)."""

    def __init__(self, order_id: int, total_amount: float, lines: int = 0):
        self.order_id = order_id
        self.total_amount = total_amount
        self.lines = lines

    def as_dict(self) -> Dict[str, Any]:
        return {"order_id": self.order_id, "total_amount": self.total_amount, "lines": self.lines}
