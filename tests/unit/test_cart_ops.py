"""Unit tests for cart operations and the single-vendor cart rule."""

import uuid
from decimal import Decimal

import pytest
from libs.common.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from services.store_service.services.cart_ops import (
    add_to_cart,
    clear_cart,
    get_cart,
    list_cart_lines,
    remove_cart_line,
    update_cart_line,
)
from tests.factories import CartLineFactory


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_creates_line(db_session, market):
    line = await add_to_cart(
        db_session,
        user_id=market.buyer.id,
        product_id=market.shirt.id,
        quantity=2,
        size="M",
        color="red",
    )
    await db_session.commit()

    assert line.quantity == 2
    assert line.size == "M"
    assert line.color == "red"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_same_key_merges_quantities(db_session, market):
    for quantity in (2, 3):
        await add_to_cart(
            db_session,
            user_id=market.buyer.id,
            product_id=market.shirt.id,
            quantity=quantity,
            size="L",
        )
    await db_session.commit()

    lines = await list_cart_lines(db_session, market.buyer.id)
    assert len(lines) == 1
    assert lines[0].quantity == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_option_is_its_own_key(db_session, market):
    """No size and size "M" are different lines, not a wildcard match."""
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.shirt.id)
    await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.shirt.id, size="M"
    )
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.shirt.id)
    await db_session.commit()

    lines = await list_cart_lines(db_session, market.buyer.id)
    by_size = {line.size: line.quantity for line in lines}
    assert by_size == {"": 2, "M": 1}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_other_vendor_conflicts(db_session, market):
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.mug.id)
    await db_session.commit()

    with pytest.raises(ConflictError):
        await add_to_cart(
            db_session, user_id=market.buyer.id, product_id=market.lamp.id
        )

    lines = await list_cart_lines(db_session, market.buyer.id)
    assert [line.product_id for line in lines] == [market.mug.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_to_cart_holding_vendorless_line_conflicts(db_session, market):
    line = CartLineFactory.create(market.buyer.id, market.orphan.id)
    line_id = line.id
    db_session.add(line)
    await db_session.commit()

    with pytest.raises(ConflictError) as excinfo:
        await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.mug.id)

    assert excinfo.value.details == {"cart_line_id": str(line_id)}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_vendor_lock_is_per_buyer(db_session, market):
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.mug.id)
    line = await add_to_cart(
        db_session, user_id=market.admin.id, product_id=market.lamp.id
    )

    assert line.user_id == market.admin.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_unknown_product(db_session, market):
    with pytest.raises(NotFoundError):
        await add_to_cart(db_session, user_id=market.buyer.id, product_id=uuid.uuid4())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_product_without_vendor(db_session, market):
    with pytest.raises(InvalidStateError):
        await add_to_cart(
            db_session, user_id=market.buyer.id, product_id=market.orphan.id
        )


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("option", [{"size": "XXL"}, {"color": "green"}])
async def test_add_undeclared_option_rejected(db_session, market, option):
    with pytest.raises(ValidationError):
        await add_to_cart(
            db_session, user_id=market.buyer.id, product_id=market.shirt.id, **option
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_any_option_allowed_when_product_declares_none(db_session, market):
    line = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id, color="teal"
    )
    assert line.color == "teal"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_zero_quantity_rejected(db_session, market):
    with pytest.raises(ValidationError):
        await add_to_cart(
            db_session, user_id=market.buyer.id, product_id=market.mug.id, quantity=0
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_sets_quantity(db_session, market):
    line = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id
    )

    updated = await update_cart_line(
        db_session, user_id=market.buyer.id, line_id=line.id, quantity=7
    )

    assert updated.quantity == 7


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("quantity", [0, -3])
async def test_update_non_positive_removes_line(db_session, market, quantity):
    line = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id
    )

    result = await update_cart_line(
        db_session, user_id=market.buyer.id, line_id=line.id, quantity=quantity
    )
    await db_session.commit()

    assert result is None
    assert await list_cart_lines(db_session, market.buyer.id) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_someone_elses_line_not_found(db_session, market):
    line = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id
    )

    with pytest.raises(NotFoundError):
        await update_cart_line(
            db_session, user_id=market.admin.id, line_id=line.id, quantity=2
        )
    with pytest.raises(NotFoundError):
        await remove_cart_line(db_session, user_id=market.admin.id, line_id=line.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remove_and_clear(db_session, market):
    first = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id
    )
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.shirt.id)

    await remove_cart_line(db_session, user_id=market.buyer.id, line_id=first.id)
    assert len(await list_cart_lines(db_session, market.buyer.id)) == 1

    assert await clear_cart(db_session, market.buyer.id) == 1
    await db_session.commit()
    assert await list_cart_lines(db_session, market.buyer.id) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_emptied_cart_accepts_another_vendor(db_session, market):
    await add_to_cart(db_session, user_id=market.buyer.id, product_id=market.mug.id)
    await clear_cart(db_session, market.buyer.id)

    line = await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.lamp.id
    )
    assert line.product_id == market.lamp.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_cart_prices_lines(db_session, market):
    """Mug 10.00 at 10% off is 9.00 each; unpriced products count as zero."""
    await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.mug.id, quantity=3
    )
    await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.shirt.id, size="S"
    )
    await add_to_cart(
        db_session, user_id=market.buyer.id, product_id=market.quote_only.id
    )
    await db_session.commit()

    cart = await get_cart(db_session, market.buyer.id)

    prices = {priced.product.name: priced.subtotal for priced in cart.lines}
    assert prices["Clay Mug"] == Decimal("27.00")
    assert prices["Cotton Shirt"] == Decimal("20.00")
    assert prices["Custom Rug"] == Decimal("0.00")
    assert cart.total == Decimal("47.00")
    assert cart.item_count == 5
