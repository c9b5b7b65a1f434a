from typing import Any, Dict
import logging

from boutique.customers import repository
from boutique.customers.models import CustomerUpdate
from boutique.errors import NotFoundError
from boutique.infra.database import get_engine

logger = logging.getLogger(__name__)


def get_customer(customer_id: str) -> Dict[str, Any]:
    with get_engine().connect() as conn:
        customer = repository.get_customer(conn, customer_id)
    if not customer:
        raise NotFoundError("Client introuvable")
    return customer


def save_customer(customer_id: str, update: CustomerUpdate) -> Dict[str, Any]:
    """Applique les champs fournis puis retourne la fiche à jour (NotFoundError si client inconnu)."""
    columns = update.to_columns()
    with get_engine().begin() as conn:
        if not repository.get_customer(conn, customer_id):
            raise NotFoundError("Client introuvable")
        repository.update_customer(conn, customer_id, columns)
        customer = repository.get_customer(conn, customer_id)
    logger.info("customers.save customer_id=%s fields=%s", customer_id, sorted(columns))
    return customer
