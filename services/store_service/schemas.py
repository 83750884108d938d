"""Pydantic schemas for Store Service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from services.store_service.models import OrderStatus, PaymentMethod, PaymentStatus

# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartLineCreate(BaseModel):
    product_id: uuid.UUID = Field(
        ..., validation_alias=AliasChoices("product_id", "productId")
    )
    quantity: int = Field(1)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)


class CartLineUpdate(BaseModel):
    # Zero or negative removes the line
    quantity: int


class CartLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None
    created_at: datetime

    @field_validator("size", "color", mode="before")
    @classmethod
    def empty_option_is_none(cls, value):
        return value or None


class CartLineView(CartLineResponse):
    product_name: str
    vendor_id: Optional[str] = None
    unit_price: Decimal
    subtotal: Decimal


class CartResponse(BaseModel):
    items: list[CartLineView] = []
    total: Decimal
    item_count: int


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class CreateOrderRequest(BaseModel):
    to_city_id: uuid.UUID = Field(
        ..., validation_alias=AliasChoices("to_city_id", "toCityId")
    )
    shipping_address: Optional[str] = Field(
        None, validation_alias=AliasChoices("shipping_address", "shippingAddress")
    )
    phone: str = Field(..., min_length=1, max_length=20)
    payment_method: PaymentMethod = Field(
        ..., validation_alias=AliasChoices("payment_method", "paymentMethod")
    )


class StatusUpdateRequest(BaseModel):
    # Checked by the orchestrator after the caller is authorized
    status: str = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal
    size: Optional[str] = None
    color: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    buyer_id: str
    vendor_id: str
    status: OrderStatus
    subtotal: Decimal
    shipping_price: Decimal
    total: Decimal
    from_city_id: Optional[uuid.UUID] = None
    to_city_id: Optional[uuid.UUID] = None
    shipping_address: Optional[str] = None
    phone: str
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    remaining_amount: Decimal
    items: list[OrderItemResponse] = []
    created_at: datetime
    updated_at: datetime


# ============================================================================
# PRICE QUOTE SCHEMAS
# ============================================================================


class QuoteItem(BaseModel):
    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    size: Optional[str] = None
    color: Optional[str] = None


class VendorQuote(BaseModel):
    vendor_id: str
    from_city_id: uuid.UUID
    to_city_id: uuid.UUID
    items: list[QuoteItem]
    products_subtotal: Decimal
    shipping_available: bool
    shipping_price: Optional[Decimal] = None
    total: Optional[Decimal] = None


class WalletQuote(BaseModel):
    balance: Decimal
    can_pay_with_wallet: bool
    sufficient_balance: bool
    amount_from_wallet: Decimal
    remaining_after_payment: Decimal
    needs_additional_payment: bool


class PriceQuoteResponse(BaseModel):
    groups: list[VendorQuote]
    products_total: Decimal
    shipping_total: Decimal
    grand_total: Decimal
    can_checkout: bool
    wallet: WalletQuote
