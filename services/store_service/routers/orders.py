"""Checkout and order lifecycle endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db, get_session_factory
from services.store_service.schemas import (
    CreateOrderRequest,
    OrderResponse,
    PriceQuoteResponse,
    StatusUpdateRequest,
)
from services.store_service.services.order_ops import (
    OrderOrchestrator,
    build_orchestrator,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

router = APIRouter(prefix="/orders", tags=["orders"])


def get_orchestrator(
    db: AsyncSession = Depends(get_async_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> OrderOrchestrator:
    return build_orchestrator(db, session_factory)


def _orders(orders) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/price-quote", response_model=ApiResponse[PriceQuoteResponse])
async def get_price_quote(
    to_city_id: uuid.UUID = Query(..., alias="toCityId"),
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Price my cart for delivery to a city, including the wallet outlook."""
    quote = await orchestrator.price_quote(current_user.user_id, to_city_id)
    return ok(quote)


@router.post(
    "",
    response_model=ApiResponse[list[OrderResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def create_orders(
    body: CreateOrderRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=100),
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Check out my cart: one order per vendor."""
    orders = await orchestrator.create_order(
        current_user.user_id,
        to_city_id=body.to_city_id,
        phone=body.phone,
        payment_method=body.payment_method,
        shipping_address=body.shipping_address,
        checkout_key=idempotency_key,
    )
    return ok(_orders(orders), "Order created successfully")


@router.get("", response_model=ApiResponse[list[OrderResponse]])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    orders = await orchestrator.list_for_buyer(current_user.user_id)
    return ok(_orders(orders))


@router.get("/vendor", response_model=ApiResponse[list[OrderResponse]])
async def list_vendor_orders(
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Orders placed with me as the vendor."""
    orders = await orchestrator.list_for_vendor(current_user.user_id)
    return ok(_orders(orders))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    order = await orchestrator.get_order(order_id, current_user)
    return ok(OrderResponse.model_validate(order))


@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
async def update_order_status(
    order_id: uuid.UUID,
    body: StatusUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    """Vendor or admin moves the order to its next status."""
    order = await orchestrator.update_status(order_id, body.status, current_user)
    return ok(OrderResponse.model_validate(order), "Order status updated")


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
async def cancel_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    orchestrator: OrderOrchestrator = Depends(get_orchestrator),
):
    order = await orchestrator.cancel_order(order_id, current_user.user_id)
    return ok(OrderResponse.model_validate(order), "Order cancelled")
