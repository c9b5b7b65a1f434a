"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: uvicorn, gunicorn -k uvicorn.workers.UvicornWorker)
  importe `boutique.asgi:app`.
- Toute la configuration FastAPI est centralisée dans boutique.app_setup.factory.
"""

from boutique.app import app  # noqa: F401
