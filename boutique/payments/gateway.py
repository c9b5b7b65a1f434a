"""
Décodage des paramètres renvoyés par la passerelle de paiement (Ds_MerchantParameters).
Format: JSON -> base64 -> encodage URL. Le champ utile est Ds_AuthorisationCode.
"""
import base64
import binascii
import json
import urllib.parse
from typing import Any, Dict

from boutique.errors import PaymentPayloadError

AUTHORIZATION_FIELD = "Ds_AuthorisationCode"


# module boutique.payments.gateway
def decode_merchant_parameters(raw: str) -> Dict[str, Any]:
    """
    Décode Ds_MerchantParameters en dict.
    - URL-décode puis base64 (alphabet standard ou URL-safe, padding optionnel).
    - Un '+' transformé en espace par le parsing de la query string est restauré.
    - Soulève PaymentPayloadError si une étape échoue ou si le JSON n'est pas un objet.
    """
    if not raw or not raw.strip():
        raise PaymentPayloadError("Ds_MerchantParameters manquant")
    try:
        b64 = urllib.parse.unquote(raw).strip().replace(" ", "+")
        b64 = b64.replace("-", "+").replace("_", "/")
        b64 += "=" * (-len(b64) % 4)
        decoded = base64.b64decode(b64, validate=True).decode("utf-8")
        params = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PaymentPayloadError("Ds_MerchantParameters illisible") from e
    if not isinstance(params, dict):
        raise PaymentPayloadError("Ds_MerchantParameters: objet JSON attendu")
    return params


def extract_authorization_code(params: Dict[str, Any]) -> str:
    code = str((params or {}).get(AUTHORIZATION_FIELD) or "").strip()
    if not code:
        raise PaymentPayloadError("Code d'autorisation absent")
    return code

