"""Wallet service routers package."""

from services.wallet_service.routers.admin import router as admin_wallet_router
from services.wallet_service.routers.member import router as wallet_router

__all__ = [
    "admin_wallet_router",
    "wallet_router",
]
