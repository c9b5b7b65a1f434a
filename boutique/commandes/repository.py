"""Accès aux données des commandes (Orders, "Order Details") et à l'historique client."""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection


def customer_exists(conn: Connection, customer_id: str) -> bool:
    row = conn.execute(
        text("SELECT CustomerID FROM Customers WHERE CustomerID = :customer_id"),
        {"customer_id": customer_id},
    ).first()
    return row is not None


def insert_order(conn: Connection, *, customer_id: str, order_date: str) -> int:
    res = conn.execute(
        text("INSERT INTO Orders (CustomerID, OrderDate) VALUES (:customer_id, :order_date)"),
        {"customer_id": customer_id, "order_date": order_date},
    )
    return int(res.lastrowid)


def cart_lines_with_prices(conn: Connection, cart_id: str, username: str) -> List[Dict[str, Any]]:
    """Lignes du panier appartenant à `username`, au prix catalogue courant (figé ensuite dans la commande)."""
    rows = conn.execute(
        text(
            """
            SELECT c.product_id, c.quantity, p.UnitPrice AS unit_price
            FROM cart_lines c
            JOIN Products p ON c.product_id = p.ProductID
            WHERE c.cart_id = :cart_id AND c.username = :username
            ORDER BY c.product_id
            """
        ),
        {"cart_id": cart_id, "username": username},
    ).mappings().all()
    return [dict(r) for r in rows]


def insert_order_detail(conn: Connection, *, order_id: int, product_id: int, unit_price: float, quantity: int) -> None:
    conn.execute(
        text(
            """
            INSERT INTO "Order Details" (OrderID, ProductID, UnitPrice, Quantity, Discount)
            VALUES (:order_id, :product_id, :unit_price, :quantity, 0)
            """
        ),
        {"order_id": order_id, "product_id": product_id, "unit_price": unit_price, "quantity": quantity},
    )


def order_total(conn: Connection, order_id: int) -> float:
    total = conn.execute(
        text('SELECT SUM(UnitPrice * Quantity) FROM "Order Details" WHERE OrderID = :order_id'),
        {"order_id": order_id},
    ).scalar()
    return float(total or 0)


def fetch_customer_orders(conn: Connection, customer_id: str) -> List[Dict[str, Any]]:
    """Commandes du client, les plus récentes d'abord, avec total et drapeau « payée »."""
    rows = conn.execute(
        text(
            """
            SELECT
              o.OrderID AS order_id,
              o.OrderDate AS order_date,
              (SELECT SUM(d.UnitPrice * d.Quantity)
                 FROM "Order Details" d
                WHERE d.OrderID = o.OrderID) AS total,
              (SELECT CASE WHEN COUNT(*) > 0 THEN 1 ELSE 0 END
                 FROM charges ch
                WHERE ch.order_id = o.OrderID) AS paid
            FROM Orders o
            WHERE o.CustomerID = :customer_id
            ORDER BY o.OrderDate DESC, o.OrderID DESC
            """
        ),
        {"customer_id": customer_id},
    ).mappings().all()
    return [
        {**dict(r), "total": round(float(r["total"] or 0), 2), "paid": bool(r["paid"])}
        for r in rows
    ]


def fetch_order(conn: Connection, order_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        text(
            """
            SELECT OrderID AS order_id, CustomerID AS customer_id, OrderDate AS order_date
            FROM Orders WHERE OrderID = :order_id
            """
        ),
        {"order_id": order_id},
    ).mappings().first()
    return dict(row) if row else None


def fetch_order_details(conn: Connection, order_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        text(
            """
            SELECT od.ProductID AS product_id, p.ProductName AS product_name,
                   od.UnitPrice AS unit_price, od.Quantity AS quantity, od.Discount AS discount
            FROM "Order Details" od
            JOIN Products p ON od.ProductID = p.ProductID
            WHERE od.OrderID = :order_id
            ORDER BY od.ProductID
            """
        ),
        {"order_id": order_id},
    ).mappings().all()
    return [dict(r) for r in rows]
