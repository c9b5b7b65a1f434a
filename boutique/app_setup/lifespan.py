"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Ouvre la base Northwind au démarrage (ConfigurationError fatale: pas de service sans base).
- Initialise FastAPILimiter (Redis).
- Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
  - RATE_LIMIT_REDIS_URL: URL Redis (défaut redis://127.0.0.1:6379/0)
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from boutique.infra.database import get_engine, reset_engine


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
        r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Démarrage: base puis rate limiting. Arrêt: libère le moteur SQLAlchemy.
    Les logs indiquent l’état effectif (base, rate limit) pour observabilité.
    """
    logger = logging.getLogger("uvicorn.error")
    engine = get_engine()
    logger.info("Northwind database: %s", engine.url.database)
    await _init_rate_limiter(app, logger)
    try:
        yield
    finally:
        reset_engine()
        logger.info("Database engine disposed")
