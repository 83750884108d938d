"""Deposit/withdrawal request schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from services.wallet_service.models.enums import (
    WalletRequestStatus,
    WalletRequestType,
)
from services.wallet_service.schemas.wallet import AmountRequest


class DepositRequestCreate(AmountRequest):
    evidence_url: str = Field(
        ...,
        min_length=1,
        max_length=500,
        validation_alias=AliasChoices("evidence_url", "evidenceUrl"),
    )


class WithdrawalRequestCreate(AmountRequest):
    payout_account: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("payout_account", "payoutAccount"),
    )


class ApproveWithdrawalBody(BaseModel):
    evidence_url: str = Field(
        ...,
        min_length=1,
        max_length=500,
        validation_alias=AliasChoices("evidence_url", "evidenceUrl"),
    )


class RejectRequestBody(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class WalletRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    request_type: WalletRequestType
    status: WalletRequestStatus
    amount: Decimal
    evidence_url: Optional[str] = None
    payout_account: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    transaction_id: Optional[uuid.UUID] = None
    created_at: datetime


class WalletRequestListResponse(BaseModel):
    requests: list[WalletRequestResponse]
    total: int
    skip: int
    limit: int
