from datetime import datetime, timedelta, timezone
from typing import Dict, Any
import logging

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from boutique import config
from boutique.errors import ConfigurationError, ConflictError
from boutique.infra.database import get_engine
from boutique.auth.models import AuthResponse, build_user_dict, handle_exception
from . import repository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Identifiants invalides"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), (password_hash or "").encode("utf-8"))
    except ValueError:
        # Hash stocké illisible (pas un hash bcrypt)
        return False


def _require_secret() -> str:
    if not config.JWT_SECRET:
        raise ConfigurationError("JWT_SECRET n'est pas défini dans l'environnement")
    return config.JWT_SECRET


def issue_token(user: Dict[str, Any]) -> Dict[str, Any]:
    """Signe un JWT HS256 {id, username, exp} valable JWT_EXPIRES_SECONDS."""
    secret = _require_secret()
    expires = datetime.now(timezone.utc) + timedelta(seconds=config.JWT_EXPIRES_SECONDS)
    token = jwt.encode(
        {"id": user["id"], "username": user["username"], "exp": expires},
        secret,
        algorithm=config.JWT_ALGORITHM,
    )
    return {"access_token": token, "expires_in": config.JWT_EXPIRES_SECONDS}


def decode_token(token: str) -> Dict[str, Any]:
    """Vérifie signature et expiration; lève jwt.InvalidTokenError sinon."""
    return jwt.decode(token, _require_secret(), algorithms=[config.JWT_ALGORITHM])

# --- Cas d’usage Auth exposés ---

def register(username: str, password: str, accept_policy: bool = False, accept_marketing: bool = False) -> Dict[str, Any]:
    """Inscription:
    - ConflictError si le nom d'utilisateur existe déjà
    - Crée le client Northwind homonyme s'il n'existe pas (INSERT OR IGNORE)
    - Stocke le mot de passe sous forme de hash bcrypt
    Le tout dans une seule transaction.
    """
    username = (username or "").strip()
    try:
        with get_engine().begin() as conn:
            if repository.username_exists(conn, username):
                raise ConflictError("Nom d'utilisateur déjà utilisé")
            repository.ensure_customer(conn, username)
            user_id = repository.insert_user(
                conn,
                username=username,
                password_hash=hash_password(password),
                accept_policy=accept_policy,
                accept_marketing=accept_marketing,
            )
    except IntegrityError as e:
        raise ConflictError("Nom d'utilisateur déjà utilisé") from e
    logger.info("auth.register username=%s", username)
    return {"id": user_id, "username": username}


def login(username: str, password: str) -> AuthResponse:
    """Connexion:
    - Vérifie le couple identifiant / mot de passe (bcrypt)
    - Émet un jeton signé à durée limitée
    - Réponse non réussie (INVALID_CREDENTIALS) si inconnu ou mot de passe faux
    - ConfigurationError (fatale) si JWT_SECRET est absent
    """
    username = (username or "").strip()
    with get_engine().connect() as conn:
        row = repository.get_user_by_username(conn, username)
    if not row or not check_password(password, row.get("password")):
        return AuthResponse(False, error=INVALID_CREDENTIALS)
    user = build_user_dict(row)
    return AuthResponse(True, user=user, session=issue_token(user))


def change_password(username: str, current_password: str, new_password: str) -> AuthResponse:
    try:
        with get_engine().begin() as conn:
            row = repository.get_user_by_username(conn, username)
            if not row or not check_password(current_password, row.get("password")):
                return AuthResponse(False, error=INVALID_CREDENTIALS)
            repository.update_password(conn, username=username, password_hash=hash_password(new_password))
        return AuthResponse(True, user=build_user_dict(row))
    except SQLAlchemyError as e:
        return handle_exception("change_password", e)

# --- Intégration sécurité ---

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur depuis le jeton: {id, username, token}."""
    claims = decode_token(access_token)
    return {"id": claims.get("id"), "username": claims.get("username"), "token": access_token}
