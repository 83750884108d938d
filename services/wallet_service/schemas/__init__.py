"""Wallet Service schemas package."""

from services.wallet_service.schemas.request import (
    ApproveWithdrawalBody,
    DepositRequestCreate,
    RejectRequestBody,
    WalletRequestListResponse,
    WalletRequestResponse,
    WithdrawalRequestCreate,
)
from services.wallet_service.schemas.transaction import (
    TransactionListResponse,
    TransactionResponse,
    TransferResponse,
)
from services.wallet_service.schemas.wallet import (
    AmountRequest,
    BalanceResponse,
    LedgerCheckResponse,
    TransferRequest,
    WalletResponse,
)

__all__ = [
    "AmountRequest",
    "ApproveWithdrawalBody",
    "BalanceResponse",
    "DepositRequestCreate",
    "LedgerCheckResponse",
    "RejectRequestBody",
    "TransactionListResponse",
    "TransactionResponse",
    "TransferRequest",
    "TransferResponse",
    "WalletRequestListResponse",
    "WalletRequestResponse",
    "WalletResponse",
    "WithdrawalRequestCreate",
]
