"""Deposit and withdrawal requests reviewed by an admin.

A member files a request; nothing moves until an admin approves it, at which
point the usual ledger write runs (``credit_wallet`` for a deposit,
``withdraw`` for a payout) and the request keeps a link to that ledger row.
Like ``wallet_ops``, nothing here commits.
"""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import InvalidStateError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.common.money import to_money
from services.wallet_service.models import (
    TransactionType,
    WalletRequest,
    WalletRequestStatus,
    WalletRequestType,
)
from services.wallet_service.services.wallet_ops import (
    credit_wallet,
    get_balance,
    get_or_create_wallet,
    withdraw,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

REQUEST_REFERENCE = "wallet_request"


def _amount(amount: Decimal) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0", amount=str(amount))
    return amount


async def create_deposit_request(
    db: AsyncSession, *, user_id: str, amount: Decimal, evidence_url: str
) -> WalletRequest:
    amount = _amount(amount)
    if not evidence_url:
        raise ValidationError("Evidence is required for a deposit request")

    wallet = await get_or_create_wallet(db, user_id)
    request = WalletRequest(
        wallet_id=wallet.id,
        user_id=user_id,
        request_type=WalletRequestType.DEPOSIT,
        status=WalletRequestStatus.PENDING,
        amount=amount,
        evidence_url=evidence_url,
    )
    db.add(request)
    await db.flush()
    logger.info("Deposit request %s for %s: %s", request.id, user_id, amount)
    return request


async def create_withdrawal_request(
    db: AsyncSession, *, user_id: str, amount: Decimal, payout_account: str
) -> WalletRequest:
    """File a payout request. The balance is checked now and again on approval."""
    amount = _amount(amount)
    if not payout_account:
        raise ValidationError("Payout account is required for a withdrawal request")

    wallet = await get_or_create_wallet(db, user_id)
    balance = await get_balance(db, user_id)
    if balance < amount:
        raise InvalidStateError(
            "Insufficient balance", balance=str(balance), amount=str(amount)
        )

    request = WalletRequest(
        wallet_id=wallet.id,
        user_id=user_id,
        request_type=WalletRequestType.WITHDRAWAL,
        status=WalletRequestStatus.PENDING,
        amount=amount,
        payout_account=payout_account,
    )
    db.add(request)
    await db.flush()
    logger.info("Withdrawal request %s for %s: %s", request.id, user_id, amount)
    return request


async def list_user_requests(
    db: AsyncSession,
    user_id: str,
    *,
    request_type: Optional[WalletRequestType] = None,
    status: Optional[WalletRequestStatus] = None,
) -> list[WalletRequest]:
    query = (
        select(WalletRequest)
        .where(WalletRequest.user_id == user_id)
        .order_by(desc(WalletRequest.created_at))
    )
    if request_type is not None:
        query = query.where(WalletRequest.request_type == request_type)
    if status is not None:
        query = query.where(WalletRequest.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_requests(
    db: AsyncSession,
    *,
    request_type: Optional[WalletRequestType] = None,
    status: Optional[WalletRequestStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[WalletRequest], int]:
    """All members' requests for the admin queue, newest first, with a total."""
    filters = []
    if request_type is not None:
        filters.append(WalletRequest.request_type == request_type)
    if status is not None:
        filters.append(WalletRequest.status == status)

    total = await db.scalar(
        select(func.count()).select_from(WalletRequest).where(*filters)
    )
    result = await db.execute(
        select(WalletRequest)
        .where(*filters)
        .order_by(desc(WalletRequest.created_at))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def get_request(
    db: AsyncSession, request_id: uuid.UUID, *, for_update: bool = False
) -> WalletRequest:
    query = select(WalletRequest).where(WalletRequest.id == request_id)
    if for_update:
        query = query.with_for_update()
    request = (await db.execute(query)).scalar_one_or_none()
    if request is None:
        raise NotFoundError("Wallet request not found", request_id=str(request_id))
    return request


async def _pending(
    db: AsyncSession, request_id: uuid.UUID, expected: Optional[WalletRequestType]
) -> WalletRequest:
    request = await get_request(db, request_id, for_update=True)
    if expected is not None and request.request_type != expected:
        raise InvalidStateError(
            f"This is not a {expected.value} request",
            request_type=request.request_type.value,
        )
    if request.status != WalletRequestStatus.PENDING:
        raise InvalidStateError(
            f"Request is already {request.status.value}", status=request.status.value
        )
    return request


def _close(request: WalletRequest, status: WalletRequestStatus, admin_id: str) -> None:
    request.status = status
    request.reviewed_by = admin_id
    request.reviewed_at = utc_now()
    request.updated_at = request.reviewed_at


async def approve_deposit_request(
    db: AsyncSession, *, request_id: uuid.UUID, admin_id: str
) -> WalletRequest:
    request = await _pending(db, request_id, WalletRequestType.DEPOSIT)
    txn = await credit_wallet(
        db,
        user_id=request.user_id,
        amount=request.amount,
        description="Deposit request approved",
        transaction_type=TransactionType.DEPOSIT,
        reference_type=REQUEST_REFERENCE,
        reference_id=str(request.id),
    )
    request.transaction_id = txn.id
    _close(request, WalletRequestStatus.APPROVED, admin_id)
    await db.flush()
    logger.info("Deposit request %s approved by %s", request.id, admin_id)
    return request


async def approve_withdrawal_request(
    db: AsyncSession, *, request_id: uuid.UUID, admin_id: str, evidence_url: str
) -> WalletRequest:
    """Pay out a withdrawal. Fails InvalidState if the balance fell short since filing."""
    if not evidence_url:
        raise ValidationError("Evidence of the transfer is required to approve")
    request = await _pending(db, request_id, WalletRequestType.WITHDRAWAL)
    txn = await withdraw(
        db,
        user_id=request.user_id,
        amount=request.amount,
        description="Withdrawal request approved",
        reference_type=REQUEST_REFERENCE,
        reference_id=str(request.id),
    )
    request.transaction_id = txn.id
    request.evidence_url = evidence_url
    _close(request, WalletRequestStatus.APPROVED, admin_id)
    await db.flush()
    logger.info("Withdrawal request %s approved by %s", request.id, admin_id)
    return request


async def reject_request(
    db: AsyncSession,
    *,
    request_id: uuid.UUID,
    admin_id: str,
    reason: Optional[str] = None,
) -> WalletRequest:
    request = await _pending(db, request_id, None)
    request.rejection_reason = reason
    _close(request, WalletRequestStatus.REJECTED, admin_id)
    await db.flush()
    logger.info("Wallet request %s rejected by %s", request.id, admin_id)
    return request
