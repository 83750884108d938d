"""Public shipping price lookup."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.shipping_service.schemas import ShippingPriceResponse
from services.shipping_service.services.shipping_ops import get_shipping_price
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/shipping", tags=["shipping"])


@router.get("/price", response_model=ApiResponse[ShippingPriceResponse])
async def shipping_price(
    from_city_id: uuid.UUID = Query(..., alias="fromCityId"),
    to_city_id: uuid.UUID = Query(..., alias="toCityId"),
    db: AsyncSession = Depends(get_async_db),
):
    """Price of the directed lane fromCityId -> toCityId."""
    price = await get_shipping_price(db, from_city_id, to_city_id)
    return ok(
        ShippingPriceResponse(
            from_city_id=from_city_id, to_city_id=to_city_id, price=price
        )
    )
