"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le décodage des paramètres passerelle, le repository BD et les services de réconciliation.
"""

from .gateway import decode_merchant_parameters, extract_authorization_code
from .repository import insert_charge, fetch_charges_for_order, charge_exists
from .service import PaymentOutcome, record_charge, reconcile_callback, describe_failure

__all__ = [
    # gateway
    "decode_merchant_parameters",
    "extract_authorization_code",
    # repository
    "insert_charge",
    "fetch_charges_for_order",
    "charge_exists",
    # services
    "PaymentOutcome",
    "record_charge",
    "reconcile_callback",
    "describe_failure",
]
