# module boutique.customers.views
"""Espace client (authentifié): fiche client Northwind associée au compte."""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from boutique.customers import service as customers_service
from boutique.customers.models import CustomerUpdate
from boutique.utils.security import require_user

router = APIRouter(prefix="/api/v1/customers", tags=["Clients API"])


@router.get("/me")
def get_profile(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return customers_service.get_customer(user["username"])


@router.put("/me")
def update_profile(update: CustomerUpdate, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Met à jour uniquement les champs présents dans le corps (champs inconnus -> 422)."""
    return customers_service.save_customer(user["username"], update)
