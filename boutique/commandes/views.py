# module boutique.commandes.views

"""Endpoints de l’user story Achat/Commandes.
- POST /api/v1/cart/{cart_id}/checkout: matérialise la commande depuis le panier (authentifié).
- GET /api/v1/customers/me/orders: historique des commandes (total, payée ou non).
- GET /api/v1/customers/me/orders/{order_id}: détail d'une commande avec ses lignes.
Sécurité:
- require_user: la commande est toujours passée au nom de l'utilisateur connecté.
Les erreurs métier (client inconnu, panier vide, échec de transaction) sont traduites
en réponses JSON par les gestionnaires d'exceptions de l'application.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from boutique.commandes import service as commandes_service
from boutique.utils.security import require_user

router = APIRouter(prefix="/api/v1", tags=["Commandes API"])


@router.post("/cart/{cart_id}/checkout", status_code=201)
def checkout(cart_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Confirme la commande: lignes au prix catalogue courant, total calculé, panier vidé."""
    result = commandes_service.create_order(user["username"], cart_id)
    return result.as_dict()


@router.get("/customers/me/orders")
def list_orders(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {"orders": commandes_service.list_customer_orders(user["username"])}


@router.get("/customers/me/orders/{order_id}")
def get_order(order_id: int, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return commandes_service.get_order(user["username"], order_id)
