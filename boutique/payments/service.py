"""
Cas d'usage 'payments': réconciliation du retour de la passerelle de paiement.
- Callback OK: décode Ds_MerchantParameters, puis enregistre l'encaissement lié à la commande.
- Callback KO: restitue la tentative échouée, sans aucune écriture.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import math

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from boutique import config
from boutique.errors import BoutiqueError, ConflictError, PaymentPayloadError, TransactionError
from boutique.infra.database import get_engine
from . import gateway
from . import repository

logger = logging.getLogger(__name__)


class PaymentOutcome:
    def __init__(
        self,
        status: str,
        message: Optional[str] = None,
        authorization: str = "",
        amount: Optional[float] = None,
        order_id: Optional[int] = None,
        customer_id: Optional[str] = None,
        charge_id: Optional[int] = None,
    ):
        self.status = status
        self.message = message
        self.authorization = authorization
        self.amount = amount
        self.order_id = order_id
        self.customer_id = customer_id
        self.charge_id = charge_id

    @property
    def success(self) -> bool:
        return self.status == "success"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "authorization": self.authorization,
            "amount": self.amount,
            "currency": config.PAYMENT_CURRENCY,
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "charge_id": self.charge_id,
        }


def _to_major_units(amount_minor: str) -> float:
    value = float(amount_minor)
    if not math.isfinite(value):
        raise ValueError(f"montant non fini: {amount_minor!r}")
    return value / config.PAYMENT_MINOR_UNITS


def record_charge(customer_id: str, order_id: int, amount: float, authorization_code: str) -> int:
    """
    Enregistre un encaissement et retourne son id.
    - ConflictError si le code d'autorisation est déjà enregistré (contrainte UNIQUE).
    - TransactionError pour toute autre violation de contrainte (montant NULL, etc.).
    """
    created_at = datetime.now(timezone.utc).isoformat()
    engine = get_engine()
    try:
        with engine.begin() as conn:
            return repository.insert_charge(
                conn,
                order_id=order_id,
                customer_id=customer_id,
                amount=amount,
                authorization_code=authorization_code,
                created_at=created_at,
            )
    except IntegrityError as e:
        with engine.connect() as conn:
            duplicate = repository.charge_exists(conn, authorization_code)
        if duplicate:
            logger.warning("payments.record_charge duplicate authorization=%s order_id=%s", authorization_code, order_id)
            raise ConflictError(f"Autorisation {authorization_code} déjà enregistrée") from e
        logger.exception("Erreur enregistrement encaissement authorization=%s order_id=%s", authorization_code, order_id)
        raise TransactionError("L'encaissement n'a pas pu être enregistré") from e


def reconcile_callback(
    *,
    amount: Optional[str],
    order_id: Optional[str],
    customer_id: Optional[str],
    merchant_parameters: Optional[str],
) -> PaymentOutcome:
    """
    Traite le retour « paiement accepté ».
    - Décodage impossible -> outcome 'error', aucune écriture.
    - Décodage OK + montant (centimes), commande et client présents -> encaissement enregistré.
    - Doublon d'autorisation ou échec SQL -> outcome 'error' avec le motif.
    - Paramètres incomplets -> outcome 'incomplete', aucune écriture.
    """
    try:
        params = gateway.decode_merchant_parameters(merchant_parameters or "")
        authorization = gateway.extract_authorization_code(params)
    except PaymentPayloadError as e:
        logger.warning("payments.callback undecodable payload order_id=%s: %s", order_id, e.message)
        return PaymentOutcome("error", "Impossible de lire l'autorisation du paiement.", customer_id=customer_id)

    if not (amount and order_id and customer_id):
        return PaymentOutcome(
            "incomplete",
            "Paramètres de paiement incomplets: aucun encaissement enregistré.",
            authorization=authorization,
            customer_id=customer_id,
        )

    try:
        amount_value = _to_major_units(amount)
        order_id_value = int(order_id)
    except ValueError:
        return PaymentOutcome("error", "Montant ou identifiant de commande invalide.", authorization=authorization, customer_id=customer_id)

    outcome = PaymentOutcome(
        "success",
        authorization=authorization,
        amount=amount_value,
        order_id=order_id_value,
        customer_id=customer_id,
    )
    try:
        outcome.charge_id = record_charge(customer_id, order_id_value, amount_value, authorization)
        outcome.message = "Encaissement enregistré avec succès"
        logger.info("payments.callback recorded charge_id=%s order_id=%s amount=%.2f", outcome.charge_id, order_id_value, amount_value)
    except BoutiqueError as e:
        outcome.status = "error"
        outcome.message = f"Erreur lors de l'enregistrement du paiement: {e.message}"
    except SQLAlchemyError as e:
        logger.exception("Erreur enregistrement encaissement order_id=%s", order_id_value)
        outcome.status = "error"
        outcome.message = f"Erreur lors de l'enregistrement du paiement: {e}"
    return outcome


def describe_failure(
    *,
    amount: Optional[str],
    order_id: Optional[str],
    customer_id: Optional[str],
    msg: Optional[str] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """Retour « paiement refusé »: aucune écriture, simple restitution de la tentative."""
    try:
        amount_value = _to_major_units(amount) if amount else None
    except ValueError:
        amount_value = None
    logger.info("payments.callback failed order_id=%s customer_id=%s code=%s", order_id, customer_id, code)
    return {
        "status": "failed",
        "message": "Le paiement n'a pas pu être traité.",
        "amount": amount_value,
        "currency": config.PAYMENT_CURRENCY,
        "order_id": order_id,
        "customer_id": customer_id,
        "gateway_message": msg,
        "gateway_code": code,
    }
