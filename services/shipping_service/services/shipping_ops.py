"""Shipping lane lookup and administration."""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.errors import ConflictError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.common.money import to_money
from services.catalog_service.services.lookups import get_city
from services.shipping_service.models import ShippingLane
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Price lookup
# ---------------------------------------------------------------------------


async def find_lane(
    db: AsyncSession, from_city_id: uuid.UUID, to_city_id: uuid.UUID
) -> Optional[ShippingLane]:
    result = await db.execute(
        select(ShippingLane).where(
            ShippingLane.from_city_id == from_city_id,
            ShippingLane.to_city_id == to_city_id,
        )
    )
    return result.scalar_one_or_none()


async def get_shipping_price(
    db: AsyncSession, from_city_id: uuid.UUID, to_city_id: uuid.UUID
) -> Decimal:
    """Exact-match lookup on the directed pair. Raises NotFoundError if absent."""
    lane = await find_lane(db, from_city_id, to_city_id)
    if lane is None:
        raise NotFoundError(
            "Shipping price not found for this route",
            from_city_id=str(from_city_id),
            to_city_id=str(to_city_id),
        )
    return to_money(lane.price)


class SqlShippingResolver:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def price_of(
        self, from_city_id: uuid.UUID, to_city_id: uuid.UUID
    ) -> Decimal:
        return await get_shipping_price(self.db, from_city_id, to_city_id)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def list_lanes(
    db: AsyncSession,
    from_city_id: Optional[uuid.UUID] = None,
    to_city_id: Optional[uuid.UUID] = None,
) -> list[ShippingLane]:
    query = select(ShippingLane).order_by(ShippingLane.created_at.desc())
    if from_city_id:
        query = query.where(ShippingLane.from_city_id == from_city_id)
    if to_city_id:
        query = query.where(ShippingLane.to_city_id == to_city_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_lane(db: AsyncSession, lane_id: uuid.UUID) -> ShippingLane:
    lane = await db.get(ShippingLane, lane_id)
    if lane is None:
        raise NotFoundError("Shipping lane not found", lane_id=str(lane_id))
    return lane


async def _check_route(
    db: AsyncSession,
    from_city_id: uuid.UUID,
    to_city_id: uuid.UUID,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    if from_city_id == to_city_id:
        raise ValidationError("From city and to city cannot be the same")

    await get_city(db, from_city_id)
    await get_city(db, to_city_id)

    existing = await find_lane(db, from_city_id, to_city_id)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(
            "Shipping price already exists for this route",
            lane_id=str(existing.id),
        )


async def create_lane(
    db: AsyncSession,
    *,
    from_city_id: uuid.UUID,
    to_city_id: uuid.UUID,
    price: Decimal,
) -> ShippingLane:
    if price < 0:
        raise ValidationError("Shipping price cannot be negative")
    await _check_route(db, from_city_id, to_city_id)

    lane = ShippingLane(
        from_city_id=from_city_id, to_city_id=to_city_id, price=to_money(price)
    )
    db.add(lane)
    await db.commit()
    await db.refresh(lane)

    logger.info("Created shipping lane %s->%s at %s", from_city_id, to_city_id, price)
    return lane


async def update_lane(
    db: AsyncSession,
    lane_id: uuid.UUID,
    *,
    from_city_id: Optional[uuid.UUID] = None,
    to_city_id: Optional[uuid.UUID] = None,
    price: Optional[Decimal] = None,
) -> ShippingLane:
    lane = await get_lane(db, lane_id)

    if from_city_id is not None or to_city_id is not None:
        final_from = from_city_id or lane.from_city_id
        final_to = to_city_id or lane.to_city_id
        await _check_route(db, final_from, final_to, exclude_id=lane.id)
        lane.from_city_id = final_from
        lane.to_city_id = final_to

    if price is not None:
        if price < 0:
            raise ValidationError("Shipping price cannot be negative")
        lane.price = to_money(price)

    await db.commit()
    await db.refresh(lane)
    return lane


async def delete_lane(db: AsyncSession, lane_id: uuid.UUID) -> None:
    lane = await get_lane(db, lane_id)
    await db.delete(lane)
    await db.commit()
    logger.info("Deleted shipping lane %s", lane_id)
