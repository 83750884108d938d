"""WalletRequest model: member top-up and payout requests awaiting an admin."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, enum_values
from services.wallet_service.models.enums import (
    WalletRequestStatus,
    WalletRequestType,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class WalletRequest(Base):
    """A deposit or withdrawal the member asked for.

    The wallet only moves when an admin approves the request; the ledger row
    written at that point is linked through ``transaction_id``.
    """

    __tablename__ = "wallet_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("wallets.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    request_type: Mapped[WalletRequestType] = mapped_column(
        SAEnum(
            WalletRequestType,
            name="wallet_request_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    status: Mapped[WalletRequestStatus] = mapped_column(
        SAEnum(
            WalletRequestStatus,
            name="wallet_request_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=WalletRequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Proof of payment for a deposit, proof of transfer for an approved payout
    evidence_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # Where a withdrawal is paid out (mobile wallet number, bank account)
    payout_account: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    reviewed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("wallet_transactions.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="positive_request_amount"),
    )

    wallet = relationship("Wallet", back_populates="requests")

    def __repr__(self):
        return f"<WalletRequest {self.request_type} {self.amount} {self.status}>"
