"""FastAPI application for the Wallet Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from libs.common.responses import register_exception_handlers
from services.wallet_service.routers import admin_wallet_router, wallet_router


def create_app() -> FastAPI:
    """Create and configure the Wallet Service FastAPI app."""
    app = FastAPI(
        title="Souq Wallet Service",
        version="0.1.0",
        description="Wallet balances and the append-only wallet ledger.",
    )
    add_observability_middleware(app)
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "wallet"}

    # Member-facing routes
    app.include_router(wallet_router)

    # Admin routes
    app.include_router(admin_wallet_router)

    return app


app = create_app()
