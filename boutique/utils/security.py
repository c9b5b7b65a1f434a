from fastapi import Request, HTTPException, Depends
from fastapi.responses import Response
from typing import Optional, Dict, Any
import jwt

from boutique import config

COOKIE_NAME = "boutique_access"


def set_session_cookie(response: Response, access_token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="Lax",
        max_age=config.JWT_EXPIRES_SECONDS,
        path="/",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")


def token_from_request(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None


def get_current_user(request: Request) -> Dict[str, Any]:
    token = token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    # Délégué au service Auth
    from boutique.auth.service import get_user_from_token as _svc_get_user_from_token
    try:
        user = _svc_get_user_from_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("username"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    return user


def get_optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """Utilisateur courant si une session valide est présente, sinon None (paniers anonymes)."""
    if not token_from_request(request):
        return None
    try:
        return get_current_user(request)
    except HTTPException:
        return None


def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
