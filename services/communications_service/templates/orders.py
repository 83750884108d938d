"""
Order notification texts.

Each builder returns ``(title, body)``.
"""

from decimal import Decimal
from typing import Optional

STATUS_MESSAGES = {
    "pending": "Your order is being reviewed",
    "confirmed": "Your order has been confirmed",
    "processing": "Your order is being prepared",
    "shipped": "Your order has been shipped",
    "delivered": "Your order has been delivered",
    "cancelled": "Your order has been cancelled",
}


def order_created(order_ref: str, total: Decimal, currency: str) -> tuple[str, str]:
    return (
        "Order placed",
        f"Your order #{order_ref} was created. Total: {total} {currency}",
    )


def vendor_new_order(
    order_ref: str, customer_name: str, total: Decimal, currency: str
) -> tuple[str, str]:
    return (
        "New order",
        f"You have a new order #{order_ref} from {customer_name}. "
        f"Amount: {total} {currency}",
    )


def order_status_changed(order_ref: str, status: str) -> tuple[str, str]:
    message = STATUS_MESSAGES.get(status, f"Your order status is now {status}")
    return "Order status updated", f"Order #{order_ref}: {message}"


def order_delivered(order_ref: str) -> tuple[str, str]:
    return (
        "Order delivered",
        f"Your order #{order_ref} was delivered. Thank you for shopping with us!",
    )


def payment_received(order_ref: str, amount: Decimal, currency: str) -> tuple[str, str]:
    return "Payment received", f"Received {amount} {currency} for order #{order_ref}"


def order_cancelled(
    order_ref: str, refunded: Optional[Decimal], currency: str
) -> tuple[str, str]:
    body = f"Your order #{order_ref} was cancelled."
    if refunded:
        body += f" {refunded} {currency} was refunded to your wallet."
    return "Order cancelled", body
