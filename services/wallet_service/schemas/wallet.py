"""Wallet request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime


class BalanceResponse(BaseModel):
    balance: Decimal


class AmountRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class TransferRequest(AmountRequest):
    to_user_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("to_user_id", "toUserId")
    )
    description: Optional[str] = Field(None, max_length=500)


class LedgerCheckResponse(BaseModel):
    balance: Decimal
    ledger_balance: Decimal
    transaction_count: int
    consistent: bool
