import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from boutique.app_setup.exceptions import register_exception_handlers
from boutique.errors import (
    BoutiqueError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PaymentPayloadError,
    TransactionError,
    ValidationError,
)


def _make_app(exc: Exception):
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise exc

    return app


@pytest.mark.parametrize(
    "exc, status, kind",
    [
        (ConfigurationError("Base Northwind introuvable"), 500, "configuration"),
        (NotFoundError("Client introuvable"), 404, "not_found"),
        (ForbiddenError("Ce panier appartient à un autre compte"), 403, "forbidden"),
        (ValidationError("Le panier est vide"), 400, "validation"),
        (PaymentPayloadError("Ds_MerchantParameters illisible"), 400, "payment_payload"),
        (ConflictError("Nom d'utilisateur déjà utilisé"), 409, "conflict"),
        (TransactionError("La commande n'a pas pu être enregistrée"), 500, "transaction"),
    ],
)
def test_boutique_errors_are_translated(exc, status, kind):
    client = TestClient(_make_app(exc))
    res = client.get("/boom")
    assert res.status_code == status
    assert res.json() == {"detail": exc.message, "kind": kind}


def test_http_exception_keeps_detail_shape():
    client = TestClient(_make_app(HTTPException(status_code=401, detail="Non authentifié")))
    res = client.get("/boom")
    assert res.status_code == 401
    assert res.json() == {"detail": "Non authentifié"}


def test_error_hierarchy():
    assert issubclass(PaymentPayloadError, ValidationError)
    for cls in (ConfigurationError, NotFoundError, ForbiddenError, ValidationError, ConflictError, TransactionError):
        assert issubclass(cls, BoutiqueError)
    err = NotFoundError("Produit 3 introuvable")
    assert str(err) == "Produit 3 introuvable"
    assert err.status_code == 404
