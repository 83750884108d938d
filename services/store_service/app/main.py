"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from libs.common.responses import register_exception_handlers
from services.store_service.routers import cart_router, orders_router


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="Souq Store Service",
        version="0.1.0",
        description="Cart, checkout and order lifecycle for the Souq marketplace.",
    )
    add_observability_middleware(app)
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    app.include_router(cart_router)
    app.include_router(orders_router)

    return app


app = create_app()
