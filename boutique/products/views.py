# module boutique.products.views
"""Endpoints du catalogue (lecture seule).
- GET /api/v1/products: tous les produits, ou un sous-ensemble via ?ids=1,2,3
- GET /api/v1/products/{product_id}: détail (404 si inconnu)
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from boutique.infra.database import get_engine
from boutique.products import repository

router = APIRouter(prefix="/api/v1/products", tags=["Catalogue API"])


def _parse_ids(ids: str):
    try:
        return [int(i) for i in ids.split(",") if i.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Identifiants de produits invalides")


@router.get("")
def list_products(ids: Optional[str] = None) -> Dict[str, Any]:
    with get_engine().connect() as conn:
        if ids is not None:
            by_id = repository.get_products_by_ids(conn, _parse_ids(ids))
            return {"products": list(by_id.values())}
        return {"products": repository.list_products(conn)}


@router.get("/{product_id}")
def get_product(product_id: int) -> Dict[str, Any]:
    with get_engine().connect() as conn:
        product = repository.get_product(conn, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    return product
