"""Admin shipping lane management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.shipping_service.schemas import (
    ShippingLaneCreate,
    ShippingLaneResponse,
    ShippingLaneUpdate,
)
from services.shipping_service.services.shipping_ops import (
    create_lane,
    delete_lane,
    get_lane,
    list_lanes,
    update_lane,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/shipping", tags=["admin-shipping"])


@router.get("", response_model=ApiResponse[list[ShippingLaneResponse]])
async def list_shipping_lanes(
    from_city_id: Optional[uuid.UUID] = Query(None, alias="fromCityId"),
    to_city_id: Optional[uuid.UUID] = Query(None, alias="toCityId"),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    lanes = await list_lanes(db, from_city_id=from_city_id, to_city_id=to_city_id)
    return ok([ShippingLaneResponse.model_validate(lane) for lane in lanes])


@router.get("/{lane_id}", response_model=ApiResponse[ShippingLaneResponse])
async def get_shipping_lane(
    lane_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    lane = await get_lane(db, lane_id)
    return ok(ShippingLaneResponse.model_validate(lane))


@router.post(
    "",
    response_model=ApiResponse[ShippingLaneResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_shipping_lane(
    body: ShippingLaneCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    lane = await create_lane(
        db,
        from_city_id=body.from_city_id,
        to_city_id=body.to_city_id,
        price=body.price,
    )
    return ok(ShippingLaneResponse.model_validate(lane), "Shipping lane created")


@router.patch("/{lane_id}", response_model=ApiResponse[ShippingLaneResponse])
async def update_shipping_lane(
    lane_id: uuid.UUID,
    body: ShippingLaneUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    lane = await update_lane(
        db,
        lane_id,
        from_city_id=body.from_city_id,
        to_city_id=body.to_city_id,
        price=body.price,
    )
    return ok(ShippingLaneResponse.model_validate(lane), "Shipping lane updated")


@router.delete("/{lane_id}", response_model=ApiResponse[None])
async def delete_shipping_lane(
    lane_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_lane(db, lane_id)
    return ok(None, "Shipping lane deleted")
