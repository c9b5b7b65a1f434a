"""Lecture du catalogue (table Products de Northwind). Lecture seule."""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

PRODUCT_COLUMNS = "ProductID AS product_id, ProductName AS name, UnitPrice AS unit_price, UnitsInStock AS units_in_stock"


def list_products(conn: Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        text(f"SELECT {PRODUCT_COLUMNS} FROM Products ORDER BY ProductID")
    ).mappings().all()
    return [dict(r) for r in rows]


def get_product(conn: Connection, product_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        text(f"SELECT {PRODUCT_COLUMNS} FROM Products WHERE ProductID = :product_id LIMIT 1"),
        {"product_id": product_id},
    ).mappings().first()
    return dict(row) if row else None


def get_products_by_ids(conn: Connection, ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """
    Retourne {product_id: produit} pour les identifiants existants.
    - Identifiants dupliqués ignorés; liste vide -> {}.
    """
    id_list = sorted({int(i) for i in ids})
    if not id_list:
        return {}
    stmt = text(
        f"SELECT {PRODUCT_COLUMNS} FROM Products WHERE ProductID IN :ids ORDER BY ProductID"
    ).bindparams(bindparam("ids", expanding=True))
    rows = conn.execute(stmt, {"ids": id_list}).mappings().all()
    return {r["product_id"]: dict(r) for r in rows}
