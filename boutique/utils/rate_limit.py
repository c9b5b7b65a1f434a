"""
Limitation de débit des endpoints sensibles (inscription, connexion, mot de passe).
- Clé: jeton de session (Bearer puis cookie, haché) sinon IP, toujours suffixée du chemin.
- LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (app.state._rl_store).
- Sinon fastapi-limiter (Redis), seulement si le lifespan a posé rate_limit_enabled = True;
  une erreur Redis en cours de route est journalisée et la requête passe.
"""
from typing import Dict, Any, List
import hashlib
import logging
import os
import time

from fastapi import Request, Response, HTTPException
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from redis.exceptions import RedisError

from boutique.utils.security import token_from_request

logger = logging.getLogger(__name__)


def client_key(request: Request) -> str:
    path = request.url.path
    token = token_from_request(request)
    if token:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"session:{digest}:{path}"
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{path}"


def _hit_local_window(request: Request, key: str, times: int, seconds: int) -> None:
    now = time.time()
    store: Dict[str, List[float]] = getattr(request.app.state, "_rl_store", None) or {}
    hits = [t for t in store.get(key, []) if now - t < seconds]
    if len(hits) >= times:
        logger.warning("rate limit exceeded key=%s", key)
        raise HTTPException(status_code=429, detail="Too Many Requests")
    hits.append(now)
    store[key] = hits
    request.app.state._rl_store = store


def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _hit_local_window(request, client_key(request), times, seconds)
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is not True:
            return

        async def _identifier(req: Request) -> str:
            return client_key(req)

        try:
            await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except RedisError as e:
            # Redis indisponible: la requête passe sans limitation
            logger.warning("rate limit backend unavailable path=%s: %s", request.url.path, e)
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": "redis" if limiter_ready else None,
        "local_fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }
