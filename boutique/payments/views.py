import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query

from boutique.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


# module boutique.payments.views
@router.get("/ok")
def payment_success(
    amount: Optional[str] = None,
    order_id: Optional[str] = Query(None, alias="orderId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    merchant_parameters: Optional[str] = Query(None, alias="Ds_MerchantParameters"),
) -> Dict[str, Any]:
    """
    Retour « paiement accepté » de la passerelle.
    - Query: amount (centimes), orderId, customerId, Ds_MerchantParameters (base64 + URL)
    - Décode l'autorisation puis enregistre l'encaissement si montant/commande/client présents
    - Réponse: {status, message, authorization, amount, order_id, customer_id, charge_id}
      status = success | error | incomplete (le message d'erreur est destiné à l'utilisateur)
    """
    outcome = payments_service.reconcile_callback(
        amount=amount,
        order_id=order_id,
        customer_id=customer_id,
        merchant_parameters=merchant_parameters,
    )
    return outcome.as_dict()


@router.get("/ko")
def payment_failure(
    amount: Optional[str] = None,
    order_id: Optional[str] = Query(None, alias="orderId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    msg: Optional[str] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """Retour « paiement refusé »: restitue la tentative (montant, commande) sans rien enregistrer."""
    return payments_service.describe_failure(
        amount=amount, order_id=order_id, customer_id=customer_id, msg=msg, code=code
    )
