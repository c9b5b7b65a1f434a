"""
Accès aux données du panier (table cart_lines).
Clé unique (product_id, cart_id): l'upsert est une seule instruction INSERT ... ON CONFLICT,
jamais un couple lecture/écriture.
Un panier dont une ligne porte un username appartient à ce compte; les lignes sans username sont anonymes.
"""
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import text
from sqlalchemy.engine import Connection


def upsert_line(conn: Connection, *, product_id: int, cart_id: str, username: Optional[str], quantity: int) -> None:
    conn.execute(
        text(
            """
            INSERT INTO cart_lines (product_id, cart_id, username, quantity)
            VALUES (:product_id, :cart_id, :username, :quantity)
            ON CONFLICT(product_id, cart_id) DO UPDATE SET
              quantity = excluded.quantity,
              username = COALESCE(excluded.username, cart_lines.username)
            """
        ),
        {"product_id": product_id, "cart_id": cart_id, "username": username, "quantity": quantity},
    )


def cart_owners(conn: Connection, cart_id: str) -> Set[str]:
    rows = conn.execute(
        text("SELECT DISTINCT username FROM cart_lines WHERE cart_id = :cart_id AND username IS NOT NULL"),
        {"cart_id": cart_id},
    ).all()
    return {r[0] for r in rows}


def claim_anonymous_lines(conn: Connection, *, cart_id: str, username: str) -> int:
    res = conn.execute(
        text("UPDATE cart_lines SET username = :username WHERE cart_id = :cart_id AND username IS NULL"),
        {"username": username, "cart_id": cart_id},
    )
    return res.rowcount


def delete_empty_lines(conn: Connection, cart_id: str) -> int:
    res = conn.execute(
        text("DELETE FROM cart_lines WHERE cart_id = :cart_id AND quantity = 0"),
        {"cart_id": cart_id},
    )
    return res.rowcount


def read_lines(conn: Connection, cart_id: str) -> List[Dict[str, Any]]:
    """Lignes du panier jointes au nom du produit (affichage)."""
    rows = conn.execute(
        text(
            """
            SELECT c.product_id, p.ProductName AS product_name, c.quantity
            FROM cart_lines c
            JOIN Products p ON c.product_id = p.ProductID
            WHERE c.cart_id = :cart_id
            ORDER BY c.product_id
            """
        ),
        {"cart_id": cart_id},
    ).mappings().all()
    return [dict(r) for r in rows]


def merged_quantities(conn: Connection, *, cart_id: str, username: str) -> List[Dict[str, Any]]:
    """Quantité maximale par produit entre les lignes anonymes du panier et celles déjà au nom de l'utilisateur."""
    rows = conn.execute(
        text(
            """
            SELECT product_id, MAX(quantity) AS quantity
            FROM cart_lines
            WHERE username = :username OR (cart_id = :cart_id AND username IS NULL)
            GROUP BY product_id
            ORDER BY product_id
            """
        ),
        {"username": username, "cart_id": cart_id},
    ).mappings().all()
    return [dict(r) for r in rows]


def delete_lines_for(conn: Connection, *, cart_id: str, username: str) -> int:
    """Lignes sources du rattachement, plus les lignes anonymes orphelines déjà rangées sous cart_id = username."""
    res = conn.execute(
        text(
            """
            DELETE FROM cart_lines
            WHERE username = :username
               OR (cart_id IN (:cart_id, :username) AND username IS NULL)
            """
        ),
        {"username": username, "cart_id": cart_id},
    )
    return res.rowcount


def insert_line(conn: Connection, *, product_id: int, cart_id: str, username: Optional[str], quantity: int) -> None:
    conn.execute(
        text(
            """
            INSERT INTO cart_lines (product_id, cart_id, username, quantity)
            VALUES (:product_id, :cart_id, :username, :quantity)
            """
        ),
        {"product_id": product_id, "cart_id": cart_id, "username": username, "quantity": quantity},
    )


def delete_cart(conn: Connection, cart_id: str, username: str) -> int:
    res = conn.execute(
        text("DELETE FROM cart_lines WHERE cart_id = :cart_id AND username = :username"),
        {"cart_id": cart_id, "username": username},
    )
    return res.rowcount
