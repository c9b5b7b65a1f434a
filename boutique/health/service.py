"""Diagnostic de la base Northwind (chemin résolu, tables présentes)."""
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from boutique.errors import ConfigurationError
from boutique.infra.database import get_engine, has_table

_TABLES = ("Customers", "Products", "Orders", "Order Details", "users", "cart_lines", "charges")


def health_db_info() -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "db_path": None,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        engine = get_engine()
        info["db_path"] = engine.url.database
        with engine.connect() as conn:
            for t in _TABLES:
                info["tables"][t] = has_table(conn, t)
        info["connect_ok"] = True
    except (ConfigurationError, SQLAlchemyError) as e:
        info["error"] = str(e)
    return info
