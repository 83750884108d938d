"""Wallet Service models package."""

from services.wallet_service.models.enums import (
    CREDIT_TYPES,
    TransactionDirection,
    TransactionType,
    WalletRequestStatus,
    WalletRequestType,
    direction_of,
)
from services.wallet_service.models.request import WalletRequest
from services.wallet_service.models.transaction import WalletTransaction
from services.wallet_service.models.wallet import Wallet

__all__ = [
    "CREDIT_TYPES",
    "TransactionDirection",
    "TransactionType",
    "Wallet",
    "WalletRequest",
    "WalletRequestStatus",
    "WalletRequestType",
    "WalletTransaction",
    "direction_of",
]
