"""FastAPI application entrypoint for the Souq gateway.

Mounts every service router under ``/api/v1`` in one process, with shared
request tracing and the uniform error envelope.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common.config import get_settings
from libs.common.middleware import add_observability_middleware
from libs.common.responses import register_exception_handlers
from services.communications_service.routers import notifications_router
from services.shipping_service.routers import admin_shipping_router, shipping_router
from services.store_service.routers import cart_router, orders_router
from services.wallet_service.routers import admin_wallet_router, wallet_router

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="Souq Gateway",
        version="0.1.0",
        description="Marketplace API: cart, checkout, wallet, shipping, notifications.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Buyer-facing routes
    app.include_router(cart_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(wallet_router, prefix=API_PREFIX)
    app.include_router(shipping_router, prefix=API_PREFIX)
    app.include_router(notifications_router, prefix=API_PREFIX)

    # Admin routes
    app.include_router(admin_shipping_router, prefix=API_PREFIX)
    app.include_router(admin_wallet_router, prefix=API_PREFIX)

    return app


app = create_app()
