"""Store commerce models: cart lines, orders, order items."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, enum_values
from services.store_service.models.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Stored in place of "no size"/"no colour" so the cart key has no NULLs
NO_OPTION = ""

# ============================================================================
# CART MODELS
# ============================================================================


class CartLine(Base):
    """One line of a user's cart. All lines of a user share one vendor."""

    __tablename__ = "carts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    size: Mapped[str] = mapped_column(
        String(50), default=NO_OPTION, server_default="", nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(50), default=NO_OPTION, server_default="", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "product_id",
            "size",
            "color",
            name="unique_user_product_size_color",
        ),
        CheckConstraint("quantity > 0", name="positive_cart_quantity"),
    )

    product = relationship("Product", lazy="joined")

    def __repr__(self):
        return f"<CartLine product={self.product_id} qty={self.quantity}>"


# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """One order per (buyer, vendor) pair of a checkout. Never deleted."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    buyer_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id"), index=True, nullable=False
    )
    vendor_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id"), index=True, nullable=False
    )

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, values_callable=enum_values, name="order_status_enum"),
        default=OrderStatus.PENDING,
        nullable=False,
    )

    # Pricing: total == subtotal + shipping_price == sum(items.subtotal) + shipping_price
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    from_city_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("cities.id"), nullable=True
    )
    to_city_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("cities.id"), nullable=True
    )
    shipping_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, values_callable=enum_values, name="payment_method_enum"),
        nullable=False,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, values_callable=enum_values, name="payment_status_enum"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    remaining_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )

    # Shared by every order of one checkout request when the client sent one
    checkout_key: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="non_negative_order_total"),
        CheckConstraint("remaining_amount >= 0", name="non_negative_remaining"),
        CheckConstraint("remaining_amount <= total", name="remaining_within_total"),
        UniqueConstraint(
            "buyer_id", "vendor_id", "checkout_key", name="unique_order_checkout_vendor"
        ),
        Index("ix_orders_buyer_checkout_key", "buyer_id", "checkout_key"),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.created_at",
    )

    def __repr__(self):
        return f"<Order {self.id} status={self.status} payment={self.payment_status}>"


class OrderItem(Base):
    """Price snapshot taken at checkout. Never recomputed from the catalog."""

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id"), nullable=False
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    size: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (CheckConstraint("quantity > 0", name="positive_item_quantity"),)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem product={self.product_id} qty={self.quantity}>"
