"""Cas d'usage « panier »: upsert, lecture, rattachement au compte après connexion.
Un panier porté par un compte n'est lisible et modifiable que par ce compte.
"""
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.engine import Connection

from boutique.auth import repository as auth_repository
from boutique.cart import repository
from boutique.errors import ForbiddenError, NotFoundError, ValidationError
from boutique.infra.database import get_engine
from boutique.products import repository as products_repository

logger = logging.getLogger(__name__)


def _clean_cart_id(cart_id: str) -> str:
    cart_id = (cart_id or "").strip()
    if not cart_id:
        raise ValidationError("Identifiant de panier manquant")
    return cart_id


def check_access(conn: Connection, cart_id: str, username: Optional[str]) -> None:
    """ForbiddenError si le panier appartient à un autre compte que `username` (None = anonyme)."""
    # cart_id = username est le panier rattaché du compte (voir reassign): réservé à ce compte
    owners = repository.cart_owners(conn, cart_id)
    if cart_id != username and auth_repository.username_exists(conn, cart_id):
        owners.add(cart_id)
    if any(owner != username for owner in owners):
        logger.warning("cart.access refused cart_id=%s username=%s", cart_id, username)
        raise ForbiddenError("Ce panier appartient à un autre compte")


def upsert(product_id: int, cart_id: str, username: Optional[str], quantity: int) -> List[Dict[str, Any]]:
    """Fixe la quantité d'un produit dans le panier.
    - Insère la ligne ou met à jour la quantité existante (même couple produit/panier).
    - Une quantité 0 supprime la ligne, dans la même transaction.
    - Un utilisateur connecté qui écrit dans un panier anonyme se l'approprie (toutes les lignes).
    - Retourne le contenu du panier après modification.
    """
    cart_id = _clean_cart_id(cart_id)
    if quantity < 0:
        raise ValidationError("La quantité doit être positive ou nulle")

    with get_engine().begin() as conn:
        check_access(conn, cart_id, username)
        if not products_repository.get_product(conn, product_id):
            raise NotFoundError(f"Produit {product_id} introuvable")
        if username:
            repository.claim_anonymous_lines(conn, cart_id=cart_id, username=username)
        repository.upsert_line(conn, product_id=product_id, cart_id=cart_id, username=username, quantity=quantity)
        repository.delete_empty_lines(conn, cart_id)
        return repository.read_lines(conn, cart_id)


def read(cart_id: str, username: Optional[str] = None) -> List[Dict[str, Any]]:
    cart_id = _clean_cart_id(cart_id)
    with get_engine().connect() as conn:
        check_access(conn, cart_id, username)
        return repository.read_lines(conn, cart_id)


def reassign(cart_id: str, username: str) -> str:
    """Rattache un panier anonyme à l'utilisateur connecté.
    - Seules les lignes anonymes du panier et celles déjà au nom de l'utilisateur sont reprises;
      les lignes d'un autre compte ne sont jamais touchées.
    - Fusion par quantité max par produit, puis réinsertion sous cart_id = username.
    - Retourne le nouvel identifiant de panier.
    """
    cart_id = _clean_cart_id(cart_id)
    username = (username or "").strip()
    if not username:
        raise ValidationError("Nom d'utilisateur manquant")

    with get_engine().begin() as conn:
        merged = repository.merged_quantities(conn, cart_id=cart_id, username=username)
        repository.delete_lines_for(conn, cart_id=cart_id, username=username)
        for row in merged:
            repository.insert_line(
                conn,
                product_id=row["product_id"],
                cart_id=username,
                username=username,
                quantity=row["quantity"],
            )
    logger.info("cart.reassign cart_id=%s username=%s lines=%s", cart_id, username, len(merged))
    return username
