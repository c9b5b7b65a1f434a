import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from boutique.cart import service as cart_service
from boutique.commandes import repository as commandes_repository
from boutique.commandes import service as commandes_service
from boutique.errors import ConfigurationError, ForbiddenError, NotFoundError, TransactionError, ValidationError
from boutique.payments import service as payments_service

DETAILS = '"Order Details"'


def test_alice_scenario(engine, count_rows):
    cart_service.upsert(7, "abc", "alice", 2)
    cart_service.upsert(9, "abc", "alice", 1)

    result = commandes_service.create_order("alice", "abc")

    assert result.total_amount == 25.00
    assert result.lines == 2
    assert count_rows("Orders", "CustomerID = 'alice'") == 1
    assert count_rows(DETAILS, "OrderID = :o", o=result.order_id) == 2
    assert cart_service.read("abc", "alice") == []


def test_detail_lines_freeze_catalog_price(engine):
    cart_service.upsert(1, "abc", "alice", 3)
    result = commandes_service.create_order("alice", "abc")

    # Hausse de prix après la commande: la ligne garde l'ancien prix
    with engine.begin() as conn:
        conn.execute(text("UPDATE Products SET UnitPrice = 99 WHERE ProductID = 1"))

    order = commandes_service.get_order("alice", result.order_id)
    assert order["details"][0]["unit_price"] == 18.0
    assert order["details"][0]["discount"] == 0
    assert order["total_amount"] == 54.0


def test_n_lines_give_n_details(engine, count_rows):
    for pid, qty in ((1, 1), (7, 4), (9, 2)):
        cart_service.upsert(pid, "big", "ALFKI", qty)
    result = commandes_service.create_order("ALFKI", "big")
    assert count_rows(DETAILS, "OrderID = :o", o=result.order_id) == 3
    assert result.total_amount == 18.0 + 40.0 + 10.0


def test_order_date_is_utc_iso(engine):
    cart_service.upsert(7, "abc", "alice", 1)
    result = commandes_service.create_order("alice", "abc")
    order = commandes_service.get_order("alice", result.order_id)
    assert order["order_date"].endswith("Z")
    assert "T" in order["order_date"]


def test_unknown_customer_rolls_back(engine, count_rows):
    cart_service.upsert(7, "abc", "nobody", 2)
    with pytest.raises(NotFoundError):
        commandes_service.create_order("nobody", "abc")
    assert count_rows("Orders") == 0
    assert count_rows(DETAILS) == 0
    assert len(cart_service.read("abc", "nobody")) == 1


def test_empty_cart_rolls_back(engine, count_rows):
    with pytest.raises(ValidationError) as exc:
        commandes_service.create_order("alice", "empty")
    assert "vide" in exc.value.message
    assert count_rows("Orders") == 0


def test_sql_failure_mid_transaction_rolls_back(engine, count_rows, monkeypatch):
    cart_service.upsert(7, "abc", "alice", 2)
    cart_service.upsert(9, "abc", "alice", 1)
    calls = {"n": 0}
    real_insert = commandes_repository.insert_order_detail

    def _failing_insert(conn, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT INTO \"Order Details\"", {}, Exception("disk I/O error"))
        return real_insert(conn, **kwargs)

    monkeypatch.setattr(commandes_repository, "insert_order_detail", _failing_insert)

    with pytest.raises(TransactionError):
        commandes_service.create_order("alice", "abc")
    assert count_rows("Orders") == 0
    assert count_rows(DETAILS) == 0
    assert len(cart_service.read("abc", "alice")) == 2


def test_history_newest_first_with_paid_flag(engine):
    cart_service.upsert(7, "c1", "alice", 1)
    first = commandes_service.create_order("alice", "c1")
    cart_service.upsert(9, "c2", "alice", 2)
    second = commandes_service.create_order("alice", "c2")
    payments_service.record_charge("alice", first.order_id, 10.0, "AUTH-1")

    orders = commandes_service.list_customer_orders("alice")

    assert [o["order_id"] for o in orders] == [second.order_id, first.order_id]
    assert orders[0]["total"] == 10.0
    assert orders[0]["paid"] is False
    assert orders[1]["paid"] is True
    assert commandes_service.list_customer_orders("ALFKI") == []


def test_get_order_of_another_customer_is_not_found(engine):
    cart_service.upsert(7, "abc", "alice", 1)
    result = commandes_service.create_order("alice", "abc")
    with pytest.raises(NotFoundError):
        commandes_service.get_order("ALFKI", result.order_id)
    with pytest.raises(NotFoundError):
        commandes_service.get_order("alice", 987654)


def test_get_order_applies_discount(engine):
    cart_service.upsert(7, "abc", "alice", 2)
    result = commandes_service.create_order("alice", "abc")
    with engine.begin() as conn:
        conn.execute(text('UPDATE "Order Details" SET Discount = 0.25 WHERE OrderID = :o'), {"o": result.order_id})

    order = commandes_service.get_order("alice", result.order_id)
    assert order["total_amount"] == 15.0
    assert order["paid"] is False
    assert order["charges"] == []
    assert order["details"][0]["product_name"] == "Uncle Bob's Organic Dried Pears"


def test_checkout_of_another_account_cart_is_refused(engine, count_rows):
    cart_service.upsert(7, "shared-id", "ALFKI", 3)

    with pytest.raises(ForbiddenError):
        commandes_service.create_order("alice", "shared-id")

    assert count_rows("Orders") == 0
    assert cart_service.read("shared-id", "ALFKI") == [
        {"product_id": 7, "product_name": "Uncle Bob's Organic Dried Pears", "quantity": 3}
    ]


def test_checkout_only_takes_the_customer_lines(engine, count_rows):
    # Ligne anonyme ajoutée à l'insu du compte: ni commandée ni supprimée
    cart_service.upsert(7, "abc", "alice", 2)
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO cart_lines (product_id, cart_id, username, quantity) VALUES (9, 'abc', NULL, 5)"))

    result = commandes_service.create_order("alice", "abc")

    assert result.lines == 1
    assert result.total_amount == 20.0
    assert count_rows("cart_lines", "cart_id = 'abc' AND username IS NULL") == 1


def test_unexpected_error_is_logged_and_rolled_back(engine, count_rows, monkeypatch, caplog):
    cart_service.upsert(7, "abc", "alice", 2)

    def _boom(conn, cart_id, username):
        raise RuntimeError("boom")

    monkeypatch.setattr(commandes_repository, "cart_lines_with_prices", _boom)

    with caplog.at_level("WARNING", logger="boutique.commandes.service"):
        with pytest.raises(RuntimeError):
            commandes_service.create_order("alice", "abc")

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert errors[0].exc_info is not None
    assert "Erreur inattendue" in errors[0].getMessage()
    assert not any("refused" in r.getMessage() for r in caplog.records)
    assert count_rows("Orders") == 0
    assert len(cart_service.read("abc", "alice")) == 1


def test_configuration_error_is_not_logged_as_refusal(monkeypatch, caplog):
    def _no_database():
        raise ConfigurationError("Base Northwind introuvable")

    monkeypatch.setattr(commandes_service, "get_engine", _no_database)

    with caplog.at_level("WARNING", logger="boutique.commandes.service"):
        with pytest.raises(ConfigurationError):
            commandes_service.create_order("alice", "abc")

    assert not any("refused" in r.getMessage() for r in caplog.records)
    assert any(r.levelname == "ERROR" and r.exc_info for r in caplog.records)
