"""Admin wallet endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db, get_session_factory
from services.communications_service.notifications import (
    NotificationSink,
    WalletRequestNotifier,
)
from services.wallet_service.models import WalletRequestStatus, WalletRequestType
from services.wallet_service.schemas import (
    ApproveWithdrawalBody,
    LedgerCheckResponse,
    RejectRequestBody,
    TransactionListResponse,
    TransactionResponse,
    WalletRequestListResponse,
    WalletRequestResponse,
)
from services.wallet_service.services.request_service import (
    approve_deposit_request,
    approve_withdrawal_request,
    get_request,
    list_requests,
    reject_request,
)
from services.wallet_service.services.wallet_ops import list_transactions, verify_ledger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

router = APIRouter(prefix="/admin/wallet", tags=["admin-wallet"])


def get_request_notifier(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> WalletRequestNotifier:
    return WalletRequestNotifier(NotificationSink(session_factory))


# ---------------------------------------------------------------------------
# Deposit / withdrawal request review
# ---------------------------------------------------------------------------


@router.get("/requests", response_model=ApiResponse[WalletRequestListResponse])
async def admin_list_requests(
    request_type: Optional[WalletRequestType] = Query(None, alias="type"),
    request_status: Optional[WalletRequestStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    requests, total = await list_requests(
        db, request_type=request_type, status=request_status, skip=skip, limit=limit
    )
    return ok(
        WalletRequestListResponse(
            requests=[WalletRequestResponse.model_validate(r) for r in requests],
            total=total,
            skip=skip,
            limit=limit,
        )
    )


@router.get("/requests/{request_id}", response_model=ApiResponse[WalletRequestResponse])
async def admin_get_request(
    request_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    request = await get_request(db, request_id)
    return ok(WalletRequestResponse.model_validate(request))


@router.post(
    "/requests/{request_id}/approve-deposit",
    response_model=ApiResponse[WalletRequestResponse],
)
async def admin_approve_deposit(
    request_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    notifier: WalletRequestNotifier = Depends(get_request_notifier),
):
    """Credit the member's wallet with the requested amount."""
    request = await approve_deposit_request(
        db, request_id=request_id, admin_id=admin.user_id
    )
    await db.commit()
    await notifier.approved(request)
    return ok(WalletRequestResponse.model_validate(request), "Deposit request approved")


@router.post(
    "/requests/{request_id}/approve-withdrawal",
    response_model=ApiResponse[WalletRequestResponse],
)
async def admin_approve_withdrawal(
    request_id: uuid.UUID,
    body: ApproveWithdrawalBody,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    notifier: WalletRequestNotifier = Depends(get_request_notifier),
):
    """Debit the member's wallet once the payout has been sent."""
    request = await approve_withdrawal_request(
        db,
        request_id=request_id,
        admin_id=admin.user_id,
        evidence_url=body.evidence_url,
    )
    await db.commit()
    await notifier.approved(request)
    return ok(
        WalletRequestResponse.model_validate(request), "Withdrawal request approved"
    )


@router.post(
    "/requests/{request_id}/reject", response_model=ApiResponse[WalletRequestResponse]
)
async def admin_reject_request(
    request_id: uuid.UUID,
    body: Optional[RejectRequestBody] = None,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    notifier: WalletRequestNotifier = Depends(get_request_notifier),
):
    request = await reject_request(
        db,
        request_id=request_id,
        admin_id=admin.user_id,
        reason=body.reason if body else None,
    )
    await db.commit()
    await notifier.rejected(request)
    return ok(WalletRequestResponse.model_validate(request), "Wallet request rejected")


# ---------------------------------------------------------------------------
# Per-user ledger
# ---------------------------------------------------------------------------


@router.get(
    "/{user_id}/transactions", response_model=ApiResponse[TransactionListResponse]
)
async def admin_list_transactions(
    user_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    transactions, total = await list_transactions(db, user_id, skip=skip, limit=limit)
    return ok(
        TransactionListResponse(
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
            total=total,
            skip=skip,
            limit=limit,
        )
    )


@router.get("/{user_id}/ledger-check", response_model=ApiResponse[LedgerCheckResponse])
async def admin_ledger_check(
    user_id: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Replay a user's ledger and compare it with the stored balance."""
    check = await verify_ledger(db, user_id)
    return ok(
        LedgerCheckResponse(
            balance=check.balance,
            ledger_balance=check.ledger_balance,
            transaction_count=check.transaction_count,
            consistent=check.consistent,
        )
    )
