"""Core wallet operations: atomic ledger writes under a row-level lock.

Every mutation follows the same shape:

1. SELECT ... FOR UPDATE on the wallet row (created lazily at zero)
2. Validate the amount and the resulting balance
3. Append a ledger row with balance snapshots
4. Move the materialized balance to ``balance_after``

Nothing here commits. The caller owns the transaction, so a ledger write can
be part of a larger unit (checkout, cancellation) and is rolled back with it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import InvalidStateError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.common.money import ZERO, to_money
from services.catalog_service.services.lookups import get_user
from services.wallet_service.models import (
    TransactionDirection,
    TransactionType,
    Wallet,
    WalletTransaction,
    direction_of,
)
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class PartialDeduction:
    deducted: Decimal
    remaining: Decimal
    transaction: WalletTransaction


@dataclass(frozen=True)
class LedgerCheck:
    balance: Decimal
    ledger_balance: Decimal
    transaction_count: int

    @property
    def consistent(self) -> bool:
        return self.balance == self.ledger_balance


def _positive(amount: Decimal) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0", amount=str(amount))
    return amount


# ---------------------------------------------------------------------------
# Wallet access
# ---------------------------------------------------------------------------


async def get_wallet(db: AsyncSession, user_id: str) -> Optional[Wallet]:
    result = await db.execute(select(Wallet).where(Wallet.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_wallet(db: AsyncSession, user_id: str) -> Wallet:
    """Return the user's wallet, creating an empty one if needed (flushed, not committed)."""
    wallet = await get_wallet(db, user_id)
    if wallet is not None:
        return wallet

    if await get_user(db, user_id) is None:
        raise NotFoundError("User not found", user_id=user_id)

    wallet = Wallet(user_id=user_id, balance=ZERO)
    db.add(wallet)
    await db.flush()
    logger.info("Created wallet %s for user %s", wallet.id, user_id)
    return wallet


async def _lock_wallet(db: AsyncSession, user_id: str) -> Wallet:
    result = await db.execute(
        select(Wallet).where(Wallet.user_id == user_id).with_for_update()
    )
    wallet = result.scalar_one_or_none()
    if wallet is None:
        wallet = await get_or_create_wallet(db, user_id)
    return wallet


async def get_balance(db: AsyncSession, user_id: str) -> Decimal:
    """Current balance. Users without a wallet have a zero balance."""
    wallet = await get_wallet(db, user_id)
    if wallet is None:
        return ZERO
    return to_money(wallet.balance)


# ---------------------------------------------------------------------------
# Ledger append
# ---------------------------------------------------------------------------


async def _append(
    db: AsyncSession,
    wallet: Wallet,
    *,
    transaction_type: TransactionType,
    amount: Decimal,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> WalletTransaction:
    direction = direction_of(transaction_type)
    balance_before = to_money(wallet.balance)
    if direction == TransactionDirection.CREDIT:
        balance_after = balance_before + amount
    else:
        balance_after = balance_before - amount
    if balance_after < 0:
        raise InvalidStateError(
            "Insufficient balance",
            balance=str(balance_before),
            amount=str(amount),
        )

    txn = WalletTransaction(
        wallet_id=wallet.id,
        user_id=wallet.user_id,
        transaction_type=transaction_type,
        direction=direction,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_after,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    db.add(txn)

    wallet.balance = balance_after
    wallet.updated_at = utc_now()
    await db.flush()

    logger.info(
        "%s %s %s for user %s, balance %s→%s",
        transaction_type.value,
        direction.value,
        amount,
        wallet.user_id,
        balance_before,
        balance_after,
    )
    return txn


# ---------------------------------------------------------------------------
# Debit
# ---------------------------------------------------------------------------


async def deduct_partial(
    db: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> PartialDeduction:
    """Take as much of ``amount`` as the balance allows.

    Insufficient funds are not an error: the shortfall comes back as
    ``remaining``. A zero balance is, since it would record a payment of
    nothing.
    """
    amount = _positive(amount)
    wallet = await _lock_wallet(db, user_id)

    balance = to_money(wallet.balance)
    if balance <= 0:
        raise InvalidStateError("Wallet balance is zero", user_id=user_id)

    deducted = min(balance, amount)
    txn = await _append(
        db,
        wallet,
        transaction_type=TransactionType.PAYMENT,
        amount=deducted,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    return PartialDeduction(
        deducted=deducted, remaining=amount - deducted, transaction=txn
    )


async def withdraw(
    db: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    description: str = "Wallet withdrawal",
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> WalletTransaction:
    """Full withdrawal only; fails InvalidState when the balance is short."""
    amount = _positive(amount)
    wallet = await _lock_wallet(db, user_id)
    return await _append(
        db,
        wallet,
        transaction_type=TransactionType.WITHDRAWAL,
        amount=amount,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
    )


# ---------------------------------------------------------------------------
# Credit
# ---------------------------------------------------------------------------


async def credit_wallet(
    db: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    description: str,
    transaction_type: TransactionType = TransactionType.DEPOSIT,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> WalletTransaction:
    if direction_of(transaction_type) != TransactionDirection.CREDIT:
        raise ValidationError(
            "Not a credit transaction type", transaction_type=transaction_type.value
        )
    amount = _positive(amount)
    wallet = await _lock_wallet(db, user_id)
    return await _append(
        db,
        wallet,
        transaction_type=transaction_type,
        amount=amount,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
    )


async def deposit(
    db: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    description: str = "Wallet deposit",
) -> WalletTransaction:
    return await credit_wallet(
        db,
        user_id=user_id,
        amount=amount,
        description=description,
        transaction_type=TransactionType.DEPOSIT,
    )


async def refund(
    db: AsyncSession,
    *,
    user_id: str,
    amount: Decimal,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> WalletTransaction:
    return await credit_wallet(
        db,
        user_id=user_id,
        amount=amount,
        description=description,
        transaction_type=TransactionType.REFUND,
        reference_type=reference_type,
        reference_id=reference_id,
    )


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------


async def transfer(
    db: AsyncSession,
    *,
    from_user_id: str,
    to_user_id: str,
    amount: Decimal,
    description: Optional[str] = None,
) -> tuple[WalletTransaction, WalletTransaction]:
    """Move funds between two wallets. Returns (transfer_out, transfer_in)."""
    if from_user_id == to_user_id:
        raise ValidationError("Cannot transfer to the same wallet")
    amount = _positive(amount)

    # Lock in a stable order so opposite transfers cannot deadlock
    wallets = {}
    for user_id in sorted((from_user_id, to_user_id)):
        wallets[user_id] = await _lock_wallet(db, user_id)

    txn_out = await _append(
        db,
        wallets[from_user_id],
        transaction_type=TransactionType.TRANSFER_OUT,
        amount=amount,
        description=description or f"Transfer to {to_user_id}",
        reference_type="user",
        reference_id=to_user_id,
    )
    txn_in = await _append(
        db,
        wallets[to_user_id],
        transaction_type=TransactionType.TRANSFER_IN,
        amount=amount,
        description=description or f"Transfer from {from_user_id}",
        reference_type="user",
        reference_id=from_user_id,
    )
    return txn_out, txn_in


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------


async def list_transactions(
    db: AsyncSession, user_id: str, *, skip: int = 0, limit: int = 50
) -> tuple[list[WalletTransaction], int]:
    total = await db.scalar(
        select(func.count())
        .select_from(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
    )
    result = await db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
        .order_by(desc(WalletTransaction.created_at))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def verify_ledger(db: AsyncSession, user_id: str) -> LedgerCheck:
    """Replay the ledger and compare with the materialized balance."""
    result = await db.execute(
        select(WalletTransaction.direction, WalletTransaction.amount).where(
            WalletTransaction.user_id == user_id
        )
    )
    rows = result.all()
    ledger_balance = ZERO
    for direction, amount in rows:
        if direction == TransactionDirection.CREDIT:
            ledger_balance += to_money(amount)
        else:
            ledger_balance -= to_money(amount)

    return LedgerCheck(
        balance=await get_balance(db, user_id),
        ledger_balance=to_money(ledger_balance),
        transaction_count=len(rows),
    )


class SqlWalletLedger:
    """Ledger operations bound to the caller's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def balance(self, user_id: str) -> Decimal:
        return await get_balance(self.db, user_id)

    async def deduct_partial(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> PartialDeduction:
        return await deduct_partial(
            self.db,
            user_id=user_id,
            amount=amount,
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
        )

    async def refund(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> WalletTransaction:
        return await refund(
            self.db,
            user_id=user_id,
            amount=amount,
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
        )
