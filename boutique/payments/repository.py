"""
Accès aux données pour la feature 'payments' (table charges).
"""
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.engine import Connection


# module boutique.payments.repository
def insert_charge(
    conn: Connection,
    *,
    order_id: int,
    customer_id: str,
    amount: float,
    authorization_code: str,
    created_at: str,
) -> int:
    """
    Insère un encaissement et retourne son id.
    - authorization_code est UNIQUE: un doublon lève IntegrityError (rien n'est écrasé).
    """
    res = conn.execute(
        text(
            """
            INSERT INTO charges (order_id, customer_id, amount, created_at, authorization_code)
            VALUES (:order_id, :customer_id, :amount, :created_at, :authorization_code)
            """
        ),
        {
            "order_id": order_id,
            "customer_id": customer_id,
            "amount": amount,
            "created_at": created_at,
            "authorization_code": authorization_code,
        },
    )
    return int(res.lastrowid)


def fetch_charges_for_order(conn: Connection, order_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        text(
            """
            SELECT id, order_id, customer_id, amount, authorization_code, created_at
            FROM charges WHERE order_id = :order_id ORDER BY id
            """
        ),
        {"order_id": order_id},
    ).mappings().all()
    return [dict(r) for r in rows]


def charge_exists(conn: Connection, authorization_code: str) -> bool:
    row = conn.execute(
        text("SELECT 1 FROM charges WHERE authorization_code = :code"),
        {"code": authorization_code},
    ).first()
    return row is not None
