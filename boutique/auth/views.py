from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
import logging

from boutique.utils.validators import validate_password_strength, validate_username
from boutique.utils.security import require_user, set_session_cookie, clear_session_cookie
from boutique.utils.rate_limit import optional_rate_limit
from boutique.cart import service as cart_service
from .service import (
    login as svc_login,
    register as svc_register,
    change_password as svc_change_password,
)

logger = logging.getLogger(__name__)

# --- API Router (/api/v1/auth) ---

api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])


class LoginRequest(BaseModel):
    username: str
    password: str
    cart_id: Optional[str] = None


class RegisterRequest(BaseModel):
    username: str
    password: str = Field(min_length=8)
    accept_policy: bool = False
    accept_marketing: bool = False

    @field_validator("username")
    def username_format(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)

    @field_validator("new_password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


@api_router.post("/register", status_code=201, dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_register(req: RegisterRequest):
    """Inscription (API JSON).
    - Valide le format du nom d'utilisateur et la force du mot de passe (Pydantic).
    - 409 si le nom d'utilisateur existe déjà (ConflictError traduite par le handler).
    - Crée aussi la fiche client Northwind homonyme.
    """
    return svc_register(req.username, req.password, req.accept_policy, req.accept_marketing)


@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest, response: Response):
    """Point d'entrée de connexion (API JSON).
    - Délègue la vérification des identifiants au service (svc_login).
    - Pose le cookie de session HTTPOnly et retourne {access_token, token_type, user}.
    - Si un cart_id anonyme est fourni, le panier est rattaché au compte et le nouvel
      identifiant de panier (le nom d'utilisateur) est renvoyé dans 'cart_id'.
    """
    result = svc_login(req.username, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error or "Identifiants invalides")

    user = result.user or {}
    cart_id = None
    if req.cart_id:
        cart_id = cart_service.reassign(req.cart_id, user.get("username"))

    set_session_cookie(response, result.access_token)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
        "expires_in": result.expires_in,
        "user": user,
        "cart_id": cart_id,
    }


@api_router.get("/me")
def api_me(user: Dict[str, Any] = Depends(require_user)):
    """Retourne l’utilisateur courant (id, username) après contrôle de session via require_user."""
    return {"id": user["id"], "username": user["username"]}


@api_router.post("/change-password", dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_change_password(req: ChangePasswordRequest, user: Dict[str, Any] = Depends(require_user)):
    result = svc_change_password(user["username"], req.current_password, req.new_password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Erreur mise à jour du mot de passe")
    return {"message": "Mot de passe mis à jour"}


@api_router.post("/logout")
def api_logout(response: Response):
    """Supprime le cookie de session et renvoie un message JSON."""
    clear_session_cookie(response)
    return {"message": "Déconnexion réussie"}
