"""ShippingLane model: directed, priced route between two cities."""

import uuid
from datetime import datetime
from decimal import Decimal

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class ShippingLane(Base):
    """A lane A->B says nothing about B->A."""

    __tablename__ = "shipping_lanes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_city_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cities.id", ondelete="CASCADE"), index=True, nullable=False
    )
    to_city_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cities.id", ondelete="CASCADE"), index=True, nullable=False
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("from_city_id", "to_city_id", name="unique_shipping_route"),
        CheckConstraint("price >= 0", name="non_negative_shipping_price"),
        CheckConstraint("from_city_id <> to_city_id", name="distinct_route_cities"),
    )

    from_city = relationship("City", foreign_keys=[from_city_id])
    to_city = relationship("City", foreign_keys=[to_city_id])

    def __repr__(self):
        return f"<ShippingLane {self.from_city_id}->{self.to_city_id} {self.price}>"
