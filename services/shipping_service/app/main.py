"""FastAPI application for the Shipping Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from libs.common.responses import register_exception_handlers
from services.shipping_service.routers import admin_shipping_router, shipping_router


def create_app() -> FastAPI:
    """Create and configure the Shipping Service FastAPI app."""
    app = FastAPI(
        title="Souq Shipping Service",
        version="0.1.0",
        description="Directed city-to-city shipping prices.",
    )
    add_observability_middleware(app)
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "shipping"}

    app.include_router(shipping_router)
    app.include_router(admin_shipping_router)

    return app


app = create_app()
