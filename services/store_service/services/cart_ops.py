"""Cart operations and the single-vendor cart rule.

A cart is the set of ``CartLine`` rows of one user. Every line of a cart
must point at a product of the same vendor; an add that would mix vendors
is rejected with ConflictError rather than merged.

Lines are keyed by (user, product, size, color). Repeated adds with the
same key merge into one line through an ``INSERT ... ON CONFLICT DO
UPDATE`` so two concurrent adds cannot produce duplicate rows.
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.money import ZERO, discounted_price, line_subtotal, to_money
from services.catalog_service.models import Product
from services.catalog_service.services.lookups import get_product
from services.store_service.models import NO_OPTION, CartLine
from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class PricedLine:
    line: CartLine
    product: Product
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class CartSummary:
    lines: list[PricedLine]
    total: Decimal

    @property
    def item_count(self) -> int:
        return sum(priced.line.quantity for priced in self.lines)


def unit_price_of(product: Product) -> Optional[Decimal]:
    """Discounted unit price, or None when the product has no public price."""
    if not product.is_price or product.price is None:
        return None
    return discounted_price(product.price, product.discount)


def _check_option(value: Optional[str], allowed: Optional[list], label: str) -> str:
    if not value:
        return NO_OPTION
    if allowed and value not in allowed:
        raise ValidationError(
            f"Invalid {label} for this product", **{label: value, "allowed": allowed}
        )
    return value


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_cart_lines(db: AsyncSession, user_id: str) -> list[CartLine]:
    result = await db.execute(
        select(CartLine)
        .where(CartLine.user_id == user_id)
        .order_by(CartLine.created_at, CartLine.id)
    )
    return list(result.unique().scalars().all())


async def get_cart(db: AsyncSession, user_id: str) -> CartSummary:
    """Cart lines with live prices. Unpriced products count as zero."""
    lines = await list_cart_lines(db, user_id)
    priced = []
    total = ZERO
    for line in lines:
        unit_price = unit_price_of(line.product) or ZERO
        subtotal = line_subtotal(unit_price, line.quantity)
        priced.append(PricedLine(line, line.product, unit_price, subtotal))
        total += subtotal
    return CartSummary(lines=priced, total=to_money(total))


async def _cart_vendor_id(db: AsyncSession, user_id: str) -> Optional[str]:
    """Vendor every existing line belongs to, or None for an empty cart."""
    result = await db.execute(
        select(CartLine.id, Product.vendor_id)
        .join(Product, Product.id == CartLine.product_id)
        .where(CartLine.user_id == user_id)
        .order_by(CartLine.created_at, CartLine.id)
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    line_id, vendor_id = row
    if vendor_id is None:
        raise ConflictError(
            "Cart contains a product without a vendor", cart_line_id=str(line_id)
        )
    return vendor_id


async def _get_own_line(
    db: AsyncSession, user_id: str, line_id: uuid.UUID
) -> CartLine:
    line = await db.get(CartLine, line_id)
    if line is None or line.user_id != user_id:
        raise NotFoundError("Cart item not found", cart_line_id=str(line_id))
    return line


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def _merge_insert(dialect_name: str):
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Unsupported database dialect for cart upsert: {dialect_name}")


async def add_to_cart(
    db: AsyncSession,
    *,
    user_id: str,
    product_id: uuid.UUID,
    quantity: int = 1,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> CartLine:
    """Add a product to the cart, merging with an identical line."""
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1", quantity=quantity)

    product = await get_product(db, product_id)
    if product.vendor_id is None:
        raise InvalidStateError("Product has no vendor", product_id=str(product_id))

    size = _check_option(size, product.sizes, "size")
    color = _check_option(color, product.colors, "color")

    cart_vendor = await _cart_vendor_id(db, user_id)
    if cart_vendor is not None and cart_vendor != product.vendor_id:
        raise ConflictError(
            "Cart already contains products from another vendor. "
            "Clear the cart or complete that order first.",
            cart_vendor_id=cart_vendor,
            product_vendor_id=product.vendor_id,
        )

    now = utc_now()
    insert = _merge_insert(db.bind.dialect.name)
    stmt = insert(CartLine).values(
        id=uuid.uuid4(),
        user_id=user_id,
        product_id=product_id,
        quantity=quantity,
        size=size,
        color=color,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "product_id", "size", "color"],
        set_={
            "quantity": CartLine.quantity + stmt.excluded.quantity,
            "updated_at": now,
        },
    ).returning(CartLine.id)
    line_id = (await db.execute(stmt)).scalar_one()

    line = await db.get(CartLine, line_id, populate_existing=True)
    logger.info(
        "Cart line %s for user %s now has quantity %s",
        line_id,
        user_id,
        line.quantity,
    )
    return line


async def update_cart_line(
    db: AsyncSession, *, user_id: str, line_id: uuid.UUID, quantity: int
) -> Optional[CartLine]:
    """Set a line's quantity. Zero or less removes it and returns None."""
    line = await _get_own_line(db, user_id, line_id)
    if quantity <= 0:
        await db.delete(line)
        await db.flush()
        return None
    line.quantity = quantity
    await db.flush()
    return line


async def remove_cart_line(
    db: AsyncSession, *, user_id: str, line_id: uuid.UUID
) -> None:
    line = await _get_own_line(db, user_id, line_id)
    await db.delete(line)
    await db.flush()


async def clear_cart(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(delete(CartLine).where(CartLine.user_id == user_id))
    return result.rowcount or 0


async def lock_cart(db: AsyncSession, user_id: str) -> None:
    """Claim the user's cart until the current transaction ends.

    The UPDATE holds row locks on PostgreSQL and the database write lock on
    SQLite, so a second checkout of the same cart waits here until the first
    one commits or rolls back.
    """
    await db.execute(
        update(CartLine)
        .where(CartLine.user_id == user_id)
        .values(updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )


class SqlCartStore:
    """Cart reads and clearing bound to the caller's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock(self, user_id: str) -> None:
        await lock_cart(self.db, user_id)

    async def lines(self, user_id: str) -> list[CartLine]:
        return await list_cart_lines(self.db, user_id)

    async def clear(self, user_id: str) -> int:
        return await clear_cart(self.db, user_id)
