"""Shipping Service models package."""

from services.shipping_service.models.lane import ShippingLane

__all__ = ["ShippingLane"]
