"""
Types d'erreurs métier de la boutique.
Chaque sous-classe porte un `kind` stable et un code HTTP; la traduction en réponse
JSON est faite par boutique.app_setup.exceptions.
"""


class BoutiqueError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(BoutiqueError):
    """Configuration absente ou invalide (fichier DB introuvable, secret JWT manquant)."""
    kind = "configuration"
    status_code = 500


class NotFoundError(BoutiqueError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(BoutiqueError):
    """Ressource rattachée à un autre compte (panier d'un autre utilisateur)."""
    kind = "forbidden"
    status_code = 403


class ValidationError(BoutiqueError):
    kind = "validation"
    status_code = 400


class PaymentPayloadError(ValidationError):
    """Ds_MerchantParameters illisible (URL, base64 ou JSON)."""
    kind = "payment_payload"


class ConflictError(BoutiqueError):
    kind = "conflict"
    status_code = 409


class TransactionError(BoutiqueError):
    """Échec inattendu dans une transaction multi-instructions (rollback effectué)."""
    kind = "transaction"
    status_code = 500
