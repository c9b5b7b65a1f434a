"""
Accès SQLite (base Northwind) via SQLAlchemy Core.
- resolve_db_path: trouve le fichier northwind.db (NORTHWIND_DB_PATH puis emplacements connus).
- get_engine: moteur unique du processus, créé à la première demande; vérifie la présence
  de la table Customers et crée les tables applicatives manquantes (users, cart_lines, charges).
- Les repositories reçoivent une Connection explicite; les services ouvrent
  engine.connect() (lecture) ou engine.begin() (écriture, rollback automatique).
"""
import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine

from boutique.config import DB_PATH_ENV, DB_PATH_CANDIDATES
from boutique.errors import ConfigurationError

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None

USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  username TEXT UNIQUE NOT NULL,
  password TEXT NOT NULL,
  accept_policy INTEGER NOT NULL DEFAULT 0,
  accept_marketing INTEGER NOT NULL DEFAULT 0,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
)
"""

CART_LINES_DDL = """
CREATE TABLE IF NOT EXISTS cart_lines (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  cart_id TEXT NOT NULL,
  username TEXT NULL,
  quantity INTEGER NOT NULL,
  UNIQUE(product_id, cart_id)
)
"""

CHARGES_DDL = """
CREATE TABLE IF NOT EXISTS charges (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  order_id INTEGER NOT NULL,
  customer_id TEXT NOT NULL,
  amount REAL NOT NULL,
  authorization_code TEXT NOT NULL UNIQUE,
  created_at TEXT NOT NULL
)
"""


def resolve_db_path() -> Path:
    """
    Résout le chemin de la base Northwind.
    - NORTHWIND_DB_PATH (relatif au répertoire courant) en priorité
    - puis northwind/northwind.db, prisma/northwind.db, northwind.db
    Soulève ConfigurationError avec la liste des chemins essayés si aucun n'existe.
    """
    cwd = Path.cwd()
    candidates = []
    from_env = (os.getenv(DB_PATH_ENV) or "").strip()
    if from_env:
        candidates.append((cwd / from_env).resolve())
    candidates.extend((cwd / c).resolve() for c in DB_PATH_CANDIDATES)

    for p in candidates:
        if p.is_file():
            return p
    tried = "\n".join(str(p) for p in candidates)
    raise ConfigurationError(f"Base Northwind introuvable. Chemins essayés:\n{tried}")


def ensure_schema(conn: Connection) -> None:
    """Crée les tables applicatives si absentes (idempotent)."""
    conn.execute(text(USERS_DDL))
    conn.execute(text(CART_LINES_DDL))
    conn.execute(text(CHARGES_DDL))


def has_table(conn: Connection, name: str) -> bool:
    row = conn.execute(
        text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"),
        {"name": name},
    ).first()
    return row is not None


def _enable_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def build_engine(db_path: Path) -> Engine:
    """
    Construit et prépare un moteur sur db_path.
    - PRAGMA foreign_keys = ON sur chaque nouvelle connexion
    - Vérifie la table Customers (sinon: mauvaise base)
    - Crée users, cart_lines, charges si besoin
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _enable_foreign_keys)

    with engine.begin() as conn:
        if not has_table(conn, "Customers"):
            engine.dispose()
            raise ConfigurationError(
                f"La table 'Customers' n'existe pas dans {db_path}. Mauvaise base de données."
            )
        ensure_schema(conn)
    logger.info("database ready path=%s", db_path)
    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine(resolve_db_path())
    return _engine


def reset_engine() -> None:
    """Libère le moteur courant; le prochain get_engine() re-résout le chemin."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
