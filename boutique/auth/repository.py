from typing import Optional, Dict, Any

from sqlalchemy import text
from sqlalchemy.engine import Connection

# --- Table users (identifiants applicatifs) ---

def get_user_by_username(conn: Connection, username: str) -> Optional[Dict[str, Any]]:
    """Ligne users complète (y compris le hash bcrypt) ou None."""
    row = conn.execute(
        text("SELECT id, username, password FROM users WHERE username = :username"),
        {"username": username},
    ).mappings().first()
    return dict(row) if row else None


def username_exists(conn: Connection, username: str) -> bool:
    row = conn.execute(text("SELECT 1 FROM users WHERE username = :username"), {"username": username}).first()
    return row is not None


def insert_user(conn: Connection, *, username: str, password_hash: str, accept_policy: bool, accept_marketing: bool) -> int:
    res = conn.execute(
        text(
            """
            INSERT INTO users (username, password, accept_policy, accept_marketing)
            VALUES (:username, :password, :accept_policy, :accept_marketing)
            """
        ),
        {
            "username": username,
            "password": password_hash,
            "accept_policy": 1 if accept_policy else 0,
            "accept_marketing": 1 if accept_marketing else 0,
        },
    )
    return int(res.lastrowid)


def update_password(conn: Connection, *, username: str, password_hash: str) -> int:
    res = conn.execute(
        text("UPDATE users SET password = :password WHERE username = :username"),
        {"password": password_hash, "username": username},
    )
    return res.rowcount

# --- Table Customers (Northwind): un client par compte, même identifiant ---

def ensure_customer(conn: Connection, username: str) -> None:
    conn.execute(
        text(
            """
            INSERT OR IGNORE INTO Customers (CustomerID, CompanyName, ContactName)
            VALUES (:customer_id, :customer_id, :customer_id)
            """
        ),
        {"customer_id": username},
    )
