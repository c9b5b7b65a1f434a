"""
Gestionnaires d’exceptions.
- BoutiqueError: code HTTP porté par la sous-classe, corps {"detail", "kind"}.
- HTTPException: corps JSON FastAPI standard {"detail"}.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from boutique.errors import BoutiqueError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BoutiqueError)
    async def boutique_error(request: Request, exc: BoutiqueError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "kind": exc.kind},
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )
