"""Catalog collaborator models: users, governments, cities, products.

These tables are owned by the catalog/admin side of the marketplace. The
checkout pipeline only reads them (product -> vendor, vendor -> city).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, enum_values
from services.catalog_service.models.enums import UserType
from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Government(Base):
    """Top-level administrative region (governorate)."""

    __tablename__ = "governments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    cities = relationship("City", back_populates="government")

    def __repr__(self):
        return f"<Government {self.name}>"


class City(Base):
    __tablename__ = "cities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    government_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("governments.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    government = relationship("Government", back_populates="cities")

    def __repr__(self):
        return f"<City {self.name}>"


class User(Base):
    """Marketplace account. Keyed by the auth subject so tokens map 1:1."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    type: Mapped[UserType] = mapped_column(
        SAEnum(UserType, values_callable=enum_values, name="user_type_enum"),
        default=UserType.USER,
        nullable=False,
    )

    # Vendors ship from this city; buyers use it as a default destination
    city_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("cities.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    city = relationship("City")

    def __repr__(self):
        return f"<User {self.id} type={self.type}>"


class Product(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vendor_id: Mapped[Optional[str]] = mapped_column(
        String(255), ForeignKey("users.id"), index=True, nullable=True
    )

    # A product without a public price (is_price=False) is "price on request"
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    is_price: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true(), nullable=False
    )
    discount: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=0, server_default="0", nullable=False
    )

    # Declared variant options; null or empty means "any / not applicable"
    sizes: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    colors: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true(), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("discount >= 0 AND discount <= 100", name="discount_percent"),
    )

    vendor = relationship("User")

    def __repr__(self):
        return f"<Product {self.name}>"
