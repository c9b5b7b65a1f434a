from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class AuthResponse:
    def __init__(
        self,
        success: bool,
        user: Optional[Dict[str, Any]] = None,
        session: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        self.success = success
        self.user = user
        self.session = session
        self.error = error

    @property
    def access_token(self):
        return (self.session or {}).get("access_token")

    @property
    def expires_in(self):
        return (self.session or {}).get("expires_in")


def build_user_dict(row: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": row.get("id"), "username": row.get("username")}


def handle_exception(action: str, e: Exception) -> AuthResponse:
    logger.exception(f"Erreur {action}")
    return AuthResponse(False, error=f"Erreur {action}: {str(e)}")
