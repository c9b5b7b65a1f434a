"""Accès à la table Customers (Northwind) pour le profil client."""
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from boutique.customers.models import CUSTOMER_COLUMNS

_SELECT = ", ".join(f"{col} AS {attr}" for attr, col in CUSTOMER_COLUMNS.items())


def get_customer(conn: Connection, customer_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        text(f"SELECT CustomerID AS customer_id, {_SELECT} FROM Customers WHERE CustomerID = :customer_id"),
        {"customer_id": customer_id},
    ).mappings().first()
    return dict(row) if row else None


def update_customer(conn: Connection, customer_id: str, columns: Dict[str, Optional[str]]) -> int:
    """
    Met à jour les colonnes fournies.
    Les noms de colonnes viennent exclusivement de CUSTOMER_COLUMNS (jamais de l'entrée utilisateur).
    """
    allowed = set(CUSTOMER_COLUMNS.values())
    unknown = set(columns) - allowed
    if unknown:
        raise ValueError(f"Colonnes non modifiables: {sorted(unknown)}")
    if not columns:
        return 0
    assignments = ", ".join(f"{col} = :{col}" for col in columns)
    res = conn.execute(
        text(f"UPDATE Customers SET {assignments} WHERE CustomerID = :customer_id"),
        {**columns, "customer_id": customer_id},
    )
    return res.rowcount
