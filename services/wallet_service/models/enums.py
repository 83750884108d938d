"""Enums for the Wallet Service models."""

import enum


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PAYMENT = "payment"
    REFUND = "refund"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


class TransactionDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


CREDIT_TYPES = frozenset(
    {TransactionType.DEPOSIT, TransactionType.REFUND, TransactionType.TRANSFER_IN}
)


def direction_of(transaction_type: TransactionType) -> TransactionDirection:
    """Sign convention: deposits, refunds and incoming transfers add."""
    if transaction_type in CREDIT_TYPES:
        return TransactionDirection.CREDIT
    return TransactionDirection.DEBIT


class WalletRequestType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class WalletRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
