"""Couche service des commandes.
Rôles:
- Matérialiser une commande depuis un panier, en une seule transaction:
  client vérifié, ligne Orders, lignes "Order Details" au prix catalogue courant,
  total calculé, panier vidé. Toute erreur annule l'ensemble (rollback).
- Exposer l'historique d'un client et le détail d'une commande.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging

from sqlalchemy.exc import SQLAlchemyError

from boutique.cart import repository as cart_repository
from boutique.cart import service as cart_service
from boutique.commandes import repository
from boutique.commandes.models import OrderResult
from boutique.errors import ForbiddenError, NotFoundError, TransactionError, ValidationError
from boutique.infra.database import get_engine
from boutique.payments import repository as payments_repository

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_order(username: str, cart_id: str) -> OrderResult:
    """Crée la commande du client `username` à partir du panier `cart_id`.
    - NotFoundError si le client n'existe pas, ValidationError si le panier est vide.
    - ForbiddenError si le panier appartient à un autre compte; seules les lignes de `username` sont reprises.
    - TransactionError pour tout autre échec SQL; dans tous les cas, aucune ligne partielle ne subsiste.
    """
    username = (username or "").strip()
    cart_id = (cart_id or "").strip()
    try:
        with get_engine().begin() as conn:
            if not repository.customer_exists(conn, username):
                raise NotFoundError("Client introuvable")
            cart_service.check_access(conn, cart_id, username)

            order_id = repository.insert_order(conn, customer_id=username, order_date=_now_iso())

            items = repository.cart_lines_with_prices(conn, cart_id, username)
            if not items:
                raise ValidationError("Le panier est vide")
            for item in items:
                repository.insert_order_detail(
                    conn,
                    order_id=order_id,
                    product_id=item["product_id"],
                    unit_price=item["unit_price"],
                    quantity=item["quantity"],
                )

            total = repository.order_total(conn, order_id)
            cart_repository.delete_cart(conn, cart_id, username)
    except (NotFoundError, ForbiddenError, ValidationError) as e:
        logger.warning("commandes.create_order refused username=%s cart_id=%s: %s", username, cart_id, e.message)
        raise
    except SQLAlchemyError as e:
        logger.exception("Erreur création commande username=%s cart_id=%s", username, cart_id)
        raise TransactionError("La commande n'a pas pu être enregistrée") from e
    except Exception:
        logger.exception("Erreur inattendue création commande username=%s cart_id=%s", username, cart_id)
        raise

    logger.info("commandes.create_order order_id=%s lines=%s total=%.2f", order_id, len(items), total)
    return OrderResult(order_id, round(total, 2), lines=len(items))


def list_customer_orders(customer_id: str) -> List[Dict[str, Any]]:
    with get_engine().connect() as conn:
        return repository.fetch_customer_orders(conn, customer_id)


def get_order(customer_id: str, order_id: int) -> Dict[str, Any]:
    """Détail d'une commande du client.
    - Les commandes d'un autre client sont traitées comme introuvables.
    - total_amount tient compte de la remise: prix x quantité x (1 - remise), arrondi à 2 décimales.
    """
    with get_engine().connect() as conn:
        order = repository.fetch_order(conn, order_id)
        if not order or order["customer_id"] != customer_id:
            raise NotFoundError("Commande introuvable")
        details = repository.fetch_order_details(conn, order_id)
        charges = payments_repository.fetch_charges_for_order(conn, order_id)

    total = sum(d["unit_price"] * d["quantity"] * (1 - (d["discount"] or 0)) for d in details)
    order["details"] = details
    order["total_amount"] = round(total, 2)
    order["paid"] = bool(charges)
    order["charges"] = charges
    return order
