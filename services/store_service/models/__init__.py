"""Store Service models package."""

from services.store_service.models.commerce import NO_OPTION, CartLine, Order, OrderItem
from services.store_service.models.enums import (
    ORDER_TRANSITIONS,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_transition,
)

__all__ = [
    "CartLine",
    "NO_OPTION",
    "ORDER_TRANSITIONS",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "TERMINAL_STATUSES",
    "can_transition",
]
