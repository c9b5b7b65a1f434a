# module boutique.cart.views
"""Endpoints du panier.
- GET /api/v1/cart/{cart_id}: contenu (produit, nom, quantité)
- PUT /api/v1/cart/{cart_id}/items/{product_id}: fixe la quantité (0 = suppression)
- DELETE /api/v1/cart/{cart_id}/items/{product_id}: retire le produit
Le panier peut être anonyme; si une session valide est présente, le panier est rattaché à l'utilisateur.
Un panier rattaché à un autre compte répond 403 (lecture comme écriture).
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boutique.cart import service as cart_service
from boutique.utils.security import get_optional_user

router = APIRouter(prefix="/api/v1/cart", tags=["Panier API"])


class QuantityRequest(BaseModel):
    quantity: int = Field(ge=0)


def _username(user: Optional[Dict[str, Any]]) -> Optional[str]:
    return (user or {}).get("username")


@router.get("/{cart_id}")
def get_cart(
    cart_id: str,
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    return {"cart_id": cart_id, "items": cart_service.read(cart_id, _username(user))}


@router.put("/{cart_id}/items/{product_id}")
def set_quantity(
    cart_id: str,
    product_id: int,
    body: QuantityRequest,
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    items = cart_service.upsert(product_id, cart_id, _username(user), body.quantity)
    return {"cart_id": cart_id, "items": items}


@router.delete("/{cart_id}/items/{product_id}")
def remove_item(
    cart_id: str,
    product_id: int,
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    items = cart_service.upsert(product_id, cart_id, _username(user), 0)
    return {"cart_id": cart_id, "items": items}
