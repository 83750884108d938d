"""Read-only catalog lookups used by cart, shipping and checkout."""

import uuid
from typing import Optional

from libs.common.errors import InvalidStateError, NotFoundError
from services.catalog_service.models import City, Product, User
from sqlalchemy.ext.asyncio import AsyncSession


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found", product_id=str(product_id))
    return product


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def get_city(db: AsyncSession, city_id: uuid.UUID) -> City:
    city = await db.get(City, city_id)
    if city is None:
        raise NotFoundError("City not found", city_id=str(city_id))
    return city


async def vendor_city_id(db: AsyncSession, vendor_id: str) -> uuid.UUID:
    """Return the city a vendor ships from.

    Raises InvalidStateError when the vendor is unknown or has no city on
    file, since shipping cannot be priced without an origin.
    """
    vendor = await db.get(User, vendor_id)
    if vendor is None:
        raise InvalidStateError("Vendor not found", vendor_id=vendor_id)
    if vendor.city_id is None:
        raise InvalidStateError(
            "Vendor has no city on file; shipping cannot be priced",
            vendor_id=vendor_id,
        )
    return vendor.city_id


class SqlCatalog:
    """Catalog lookups bound to a session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def user(self, user_id: str) -> Optional[User]:
        return await get_user(self.db, user_id)

    async def vendor_city_id(self, vendor_id: str) -> uuid.UUID:
        return await vendor_city_id(self.db, vendor_id)
