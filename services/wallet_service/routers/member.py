"""Member-facing wallet endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.wallet_service.models import WalletRequestStatus, WalletRequestType
from services.wallet_service.schemas import (
    AmountRequest,
    BalanceResponse,
    DepositRequestCreate,
    TransactionListResponse,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
    WalletRequestResponse,
    WalletResponse,
    WithdrawalRequestCreate,
)
from services.wallet_service.services.request_service import (
    create_deposit_request,
    create_withdrawal_request,
    list_user_requests,
)
from services.wallet_service.services.wallet_ops import (
    deposit,
    get_balance,
    get_or_create_wallet,
    list_transactions,
    transfer,
    withdraw,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/me", response_model=ApiResponse[WalletResponse])
async def get_my_wallet(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get current user's wallet, creating an empty one on first access."""
    wallet = await get_or_create_wallet(db, current_user.user_id)
    await db.commit()
    return ok(WalletResponse.model_validate(wallet))


@router.get("/balance", response_model=ApiResponse[BalanceResponse])
async def get_my_balance(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    balance = await get_balance(db, current_user.user_id)
    return ok(BalanceResponse(balance=balance))


@router.get("/transactions", response_model=ApiResponse[TransactionListResponse])
async def list_my_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List my ledger entries, newest first."""
    transactions, total = await list_transactions(
        db, current_user.user_id, skip=skip, limit=limit
    )
    return ok(
        TransactionListResponse(
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
            total=total,
            skip=skip,
            limit=limit,
        )
    )


@router.post("/deposit", response_model=ApiResponse[TransactionResponse])
async def deposit_to_wallet(
    body: AmountRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    txn = await deposit(db, user_id=current_user.user_id, amount=body.amount)
    await db.commit()
    return ok(TransactionResponse.model_validate(txn), "Deposit successful")


@router.post("/withdraw", response_model=ApiResponse[TransactionResponse])
async def withdraw_from_wallet(
    body: AmountRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    txn = await withdraw(db, user_id=current_user.user_id, amount=body.amount)
    await db.commit()
    return ok(TransactionResponse.model_validate(txn), "Withdrawal successful")


@router.post("/transfer", response_model=ApiResponse[TransferResponse])
async def transfer_to_user(
    body: TransferRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    txn_out, txn_in = await transfer(
        db,
        from_user_id=current_user.user_id,
        to_user_id=body.to_user_id,
        amount=body.amount,
        description=body.description,
    )
    await db.commit()
    return ok(
        TransferResponse(
            outgoing=TransactionResponse.model_validate(txn_out),
            incoming=TransactionResponse.model_validate(txn_in),
        ),
        "Transfer successful",
    )


# ---------------------------------------------------------------------------
# Deposit / withdrawal requests
# ---------------------------------------------------------------------------


@router.post(
    "/requests/deposit",
    response_model=ApiResponse[WalletRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def request_deposit(
    body: DepositRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Ask an admin to credit a deposit made outside the app."""
    request = await create_deposit_request(
        db,
        user_id=current_user.user_id,
        amount=body.amount,
        evidence_url=body.evidence_url,
    )
    await db.commit()
    return ok(WalletRequestResponse.model_validate(request), "Deposit request submitted")


@router.post(
    "/requests/withdrawal",
    response_model=ApiResponse[WalletRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def request_withdrawal(
    body: WithdrawalRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    request = await create_withdrawal_request(
        db,
        user_id=current_user.user_id,
        amount=body.amount,
        payout_account=body.payout_account,
    )
    await db.commit()
    return ok(
        WalletRequestResponse.model_validate(request), "Withdrawal request submitted"
    )


@router.get("/requests", response_model=ApiResponse[list[WalletRequestResponse]])
async def list_my_requests(
    request_type: Optional[WalletRequestType] = Query(None, alias="type"),
    request_status: Optional[WalletRequestStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    requests = await list_user_requests(
        db, current_user.user_id, request_type=request_type, status=request_status
    )
    return ok([WalletRequestResponse.model_validate(r) for r in requests])
