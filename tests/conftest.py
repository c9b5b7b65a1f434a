import pytest
from pathlib import Path
from typing import Generator, Dict, Any, Callable
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from boutique import config
from boutique.infra.database import reset_engine, get_engine

# Sous-ensemble du schéma Northwind utilisé par la boutique
NORTHWIND_SCHEMA = [
    """
    CREATE TABLE Customers (
      CustomerID TEXT PRIMARY KEY,
      CompanyName TEXT NOT NULL,
      ContactName TEXT,
      ContactTitle TEXT,
      Address TEXT,
      City TEXT,
      Region TEXT,
      PostalCode TEXT,
      Country TEXT,
      Phone TEXT,
      Fax TEXT
    )
    """,
    """
    CREATE TABLE Products (
      ProductID INTEGER PRIMARY KEY AUTOINCREMENT,
      ProductName TEXT NOT NULL,
      UnitPrice NUMERIC DEFAULT 0,
      UnitsInStock INTEGER DEFAULT 0
    )
    """,
    """
    CREATE TABLE Orders (
      OrderID INTEGER PRIMARY KEY AUTOINCREMENT,
      CustomerID TEXT REFERENCES Customers (CustomerID),
      OrderDate DATETIME
    )
    """,
    """
    CREATE TABLE "Order Details" (
      OrderID INTEGER NOT NULL REFERENCES Orders (OrderID),
      ProductID INTEGER NOT NULL REFERENCES Products (ProductID),
      UnitPrice NUMERIC NOT NULL DEFAULT 0,
      Quantity INTEGER NOT NULL DEFAULT 1,
      Discount REAL NOT NULL DEFAULT 0,
      PRIMARY KEY (OrderID, ProductID)
    )
    """,
]

PRODUCTS = [
    {"id": 1, "name": "Chai", "price": 18.0, "stock": 39},
    {"id": 7, "name": "Uncle Bob's Organic Dried Pears", "price": 10.0, "stock": 15},
    {"id": 9, "name": "Mishi Kobe Niku", "price": 5.0, "stock": 29},
]

CUSTOMERS = [
    {"id": "alice", "company": "Alice & Co"},
    {"id": "ALFKI", "company": "Alfreds Futterkiste"},
]


def build_northwind_file(path: Path) -> Path:
    """Crée une base Northwind minimale (catalogue + deux clients) dans `path`."""
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        for ddl in NORTHWIND_SCHEMA:
            conn.execute(text(ddl))
        for p in PRODUCTS:
            conn.execute(
                text("INSERT INTO Products (ProductID, ProductName, UnitPrice, UnitsInStock) VALUES (:id, :name, :price, :stock)"),
                p,
            )
        for c in CUSTOMERS:
            conn.execute(
                text("INSERT INTO Customers (CustomerID, CompanyName) VALUES (:id, :company)"),
                c,
            )
    engine.dispose()
    return path


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    # Pas de Redis pendant les tests; secret JWT déterministe
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret", raising=True)
    monkeypatch.setattr(config, "COOKIE_SECURE", False, raising=True)
    reset_engine()
    yield
    reset_engine()


@pytest.fixture()
def make_northwind() -> Callable[[Path], Path]:
    return build_northwind_file


@pytest.fixture()
def northwind_db(tmp_path, monkeypatch) -> Path:
    """Base Northwind temporaire, désignée par NORTHWIND_DB_PATH."""
    db_path = build_northwind_file(tmp_path / "northwind.db")
    monkeypatch.setenv("NORTHWIND_DB_PATH", str(db_path))
    return db_path


@pytest.fixture()
def engine(northwind_db):
    return get_engine()


@pytest.fixture()
def count_rows(engine) -> Callable[..., int]:
    def _count(table: str, where: str = "1 = 1", **params) -> int:
        with engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table} WHERE {where}"), params).scalar()
    return _count


@pytest.fixture(scope="session")
def app():
    from boutique.app import app as fastapi_app
    return fastapi_app


@pytest.fixture()
def client(app, northwind_db) -> Generator[TestClient, None, None]:
    app.state._rl_store = {}
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(client) -> Callable[..., Dict[str, Any]]:
    """Inscrit puis connecte un utilisateur via l'API; retourne l'en-tête Bearer."""
    def _login(username: str = "bob", password: str = "Secret#123") -> Dict[str, Any]:
        res = client.post("/api/v1/auth/register", json={"username": username, "password": password})
        assert res.status_code in (201, 409)
        res = client.post("/api/v1/auth/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}
    return _login
