"""
Registre central des routers (API v1, health).
- API v1: auth, produits, panier, commandes, clients, paiements
- Health: health_router
"""
from fastapi import FastAPI
from boutique.auth.views import api_router as auth_api_router
from boutique.products import views as products_views
from boutique.cart import views as cart_views
from boutique.commandes import views as commandes_views
from boutique.customers import views as customers_views
from boutique.payments import views as payments_views
from boutique.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    L’ordre n’a pas d’impact sauf conflits de chemins: le checkout (/api/v1/cart/{id}/checkout)
    et l’historique (/api/v1/customers/me/orders) sont déclarés par commandes.
    """
    # API v1
    app.include_router(auth_api_router)
    app.include_router(products_views.router)
    app.include_router(cart_views.router)
    app.include_router(commandes_views.router)
    app.include_router(customers_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
