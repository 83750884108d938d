"""Shared fixtures: authenticated caller, a seeded marketplace, wallet funding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import pytest
import pytest_asyncio
from libs.auth.models import AuthUser
from libs.common.errors import AuthenticationError
from services.catalog_service.models import UserType
from tests.factories import (
    CityFactory,
    GovernmentFactory,
    ProductFactory,
    ShippingLaneFactory,
    UserFactory,
)


class AuthState:
    """Stands in for ``get_current_user``; tests switch the caller with ``login``."""

    def __init__(self):
        self.user: Optional[AuthUser] = None

    def login(self, user_id: str, role: str = "user") -> AuthUser:
        self.user = AuthUser(user_id=user_id, role=role)
        return self.user

    def logout(self) -> None:
        self.user = None

    def current(self) -> AuthUser:
        if self.user is None:
            raise AuthenticationError("Not authenticated")
        return self.user


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@dataclass
class Market:
    cairo: object
    giza: object
    alex: object
    buyer: object
    vendor: object
    other_vendor: object
    cityless_vendor: object
    admin: object
    shirt: object
    mug: object
    lamp: object
    quote_only: object
    orphan: object
    cityless_product: object
    lane: object


@pytest_asyncio.fixture
async def market(db_session) -> Market:
    """A small marketplace, detached from the session once committed.

    - vendor ships from Cairo, other_vendor from Alexandria
    - one lane Cairo -> Giza at 15.00; nothing else
    - shirt 20.00 (sizes S/M/L, colors red/blue), mug 10.00 at 10% off,
      lamp 30.00 by other_vendor, an unpriced product, a product without
      a vendor and one from a vendor with no city

    To change a seeded row, load it again with ``db_session.get``.
    """
    government = GovernmentFactory.create()
    cairo = CityFactory.create(name="Cairo", government_id=government.id)
    giza = CityFactory.create(name="Giza", government_id=government.id)
    alex = CityFactory.create(name="Alexandria")
    db_session.add_all([government, cairo, giza, alex])
    await db_session.flush()

    buyer = UserFactory.create(id="buyer-1", name="Mona Buyer", city_id=giza.id)
    vendor = UserFactory.create(
        id="vendor-1", name="Cairo Crafts", type=UserType.VENDOR, city_id=cairo.id
    )
    other_vendor = UserFactory.create(
        id="vendor-2", name="Alex Lights", type=UserType.VENDOR, city_id=alex.id
    )
    cityless_vendor = UserFactory.create(
        id="vendor-3", name="Nowhere Goods", type=UserType.VENDOR
    )
    admin = UserFactory.create(id="admin-1", name="Admin", type=UserType.ADMIN)
    db_session.add_all([buyer, vendor, other_vendor, cityless_vendor, admin])
    await db_session.flush()

    shirt = ProductFactory.create(
        vendor_id=vendor.id,
        name="Cotton Shirt",
        price=Decimal("20.00"),
        sizes=["S", "M", "L"],
        colors=["red", "blue"],
    )
    mug = ProductFactory.create(
        vendor_id=vendor.id,
        name="Clay Mug",
        price=Decimal("10.00"),
        discount=Decimal("10"),
    )
    lamp = ProductFactory.create(
        vendor_id=other_vendor.id, name="Brass Lamp", price=Decimal("30.00")
    )
    quote_only = ProductFactory.create(
        vendor_id=vendor.id, name="Custom Rug", price=None, is_price=False
    )
    orphan = ProductFactory.create(vendor_id=None, name="Orphan Item")
    cityless_product = ProductFactory.create(
        vendor_id=cityless_vendor.id, name="Mystery Box", price=Decimal("5.00")
    )
    lane = ShippingLaneFactory.create(cairo.id, giza.id, price=Decimal("15.00"))
    db_session.add_all([shirt, mug, lamp, quote_only, orphan, cityless_product, lane])
    await db_session.commit()

    # Detached, so a rollback inside the code under test cannot expire them
    db_session.expunge_all()

    return Market(
        cairo=cairo,
        giza=giza,
        alex=alex,
        buyer=buyer,
        vendor=vendor,
        other_vendor=other_vendor,
        cityless_vendor=cityless_vendor,
        admin=admin,
        shirt=shirt,
        mug=mug,
        lamp=lamp,
        quote_only=quote_only,
        orphan=orphan,
        cityless_product=cityless_product,
        lane=lane,
    )

