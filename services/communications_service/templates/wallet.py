"""Wallet request notification texts. Builders return ``(title, body)``."""

from decimal import Decimal
from typing import Optional


def request_approved(kind: str, amount: Decimal, currency: str) -> tuple[str, str]:
    if kind == "deposit":
        return (
            "Deposit approved",
            f"Your deposit of {amount} {currency} was approved and added to your wallet.",
        )
    return (
        "Withdrawal approved",
        f"Your withdrawal of {amount} {currency} was approved and sent to you.",
    )


def request_rejected(
    kind: str, amount: Decimal, currency: str, reason: Optional[str]
) -> tuple[str, str]:
    body = f"Your {kind} request of {amount} {currency} was rejected."
    if reason:
        body += f" Reason: {reason}"
    return f"{kind.capitalize()} rejected", body
