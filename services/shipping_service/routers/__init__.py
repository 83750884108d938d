"""Shipping service routers package."""

from services.shipping_service.routers.admin import router as admin_shipping_router
from services.shipping_service.routers.shipping import router as shipping_router

__all__ = [
    "admin_shipping_router",
    "shipping_router",
]
