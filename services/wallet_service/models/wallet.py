"""Wallet model: materialized balance, one per user."""

import uuid
from datetime import datetime
from decimal import Decimal

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Wallet(Base):
    """Cached projection of the ledger. Written only together with a ledger row."""

    __tablename__ = "wallets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id"), unique=True, index=True, nullable=False
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="non_negative_wallet_balance"),
    )

    transactions = relationship(
        "WalletTransaction", back_populates="wallet", order_by="WalletTransaction.created_at"
    )
    requests = relationship("WalletRequest", back_populates="wallet")

    def __repr__(self):
        return f"<Wallet {self.user_id} balance={self.balance}>"
