"""Cart endpoints for the authenticated buyer."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.store_service.schemas import (
    CartLineCreate,
    CartLineResponse,
    CartLineUpdate,
    CartLineView,
    CartResponse,
)
from services.store_service.services.cart_ops import (
    CartSummary,
    add_to_cart,
    clear_cart,
    get_cart,
    remove_cart_line,
    update_cart_line,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(summary: CartSummary) -> CartResponse:
    items = []
    for priced in summary.lines:
        base = CartLineResponse.model_validate(priced.line)
        items.append(
            CartLineView(
                **base.model_dump(),
                product_name=priced.product.name,
                vendor_id=priced.product.vendor_id,
                unit_price=priced.unit_price,
                subtotal=priced.subtotal,
            )
        )
    return CartResponse(items=items, total=summary.total, item_count=summary.item_count)


@router.post(
    "",
    response_model=ApiResponse[CartLineResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_cart_line(
    body: CartLineCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a product to my cart. Same product/size/color merges quantities."""
    line = await add_to_cart(
        db,
        user_id=current_user.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
    )
    await db.commit()
    return ok(CartLineResponse.model_validate(line), "Product added to cart")


@router.get("", response_model=ApiResponse[CartResponse])
async def get_my_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    summary = await get_cart(db, current_user.user_id)
    return ok(_cart_response(summary))


@router.put("/{line_id}", response_model=ApiResponse[CartLineResponse])
async def update_my_cart_line(
    line_id: uuid.UUID,
    body: CartLineUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Set a line's quantity; zero or less removes the line."""
    line = await update_cart_line(
        db, user_id=current_user.user_id, line_id=line_id, quantity=body.quantity
    )
    await db.commit()
    if line is None:
        return ok(None, "Item removed from cart")
    return ok(CartLineResponse.model_validate(line), "Cart updated")


@router.delete("/{line_id}", response_model=ApiResponse[None])
async def delete_my_cart_line(
    line_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await remove_cart_line(db, user_id=current_user.user_id, line_id=line_id)
    await db.commit()
    return ok(None, "Item removed from cart")


@router.delete("", response_model=ApiResponse[None])
async def clear_my_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await clear_cart(db, current_user.user_id)
    await db.commit()
    return ok(None, "Cart cleared")
