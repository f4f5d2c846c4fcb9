# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.errors import register_exception_handlers
from storefront.api.routers import accounts, auth, carts, health, orders, products


def register_routers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(accounts.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
