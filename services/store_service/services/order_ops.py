"""Order orchestration: checkout, price quotes, status changes, cancellation.

``OrderOrchestrator`` composes the cart, the shipping resolver and the wallet
ledger. Its collaborators are passed in, so tests can swap any of them for an
in-memory fake. ``build_orchestrator`` wires the SQL-backed ones around a
single ``AsyncSession``.

Each mutating call is one unit of work: every vendor group of a checkout,
every wallet deduction and the cart clear are committed together, or rolled
back together on the first error. Notifications go out only after the
commit and never affect its outcome.
"""

import uuid
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Optional, Protocol, Union

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.money import ZERO, line_subtotal, to_money
from services.catalog_service.services.lookups import SqlCatalog
from services.communications_service.notifications import (
    NotificationSink,
    OrderNotifier,
)
from services.shipping_service.services.shipping_ops import SqlShippingResolver
from services.store_service.models import (
    TERMINAL_STATUSES,
    CartLine,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_transition,
)
from services.store_service.schemas import (
    PriceQuoteResponse,
    QuoteItem,
    VendorQuote,
    WalletQuote,
)
from services.store_service.services.cart_ops import SqlCartStore, unit_price_of
from services.wallet_service.services.wallet_ops import SqlWalletLedger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)
settings = get_settings()

ORDER_REFERENCE = "order"


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class CartStore(Protocol):
    async def lock(self, user_id: str) -> None: ...

    async def lines(self, user_id: str) -> list[CartLine]: ...

    async def clear(self, user_id: str) -> int: ...


class WalletLedger(Protocol):
    async def balance(self, user_id: str) -> Decimal: ...

    async def deduct_partial(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Any: ...

    async def refund(
        self,
        user_id: str,
        amount: Decimal,
        description: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Any: ...


class ShippingResolver(Protocol):
    async def price_of(
        self, from_city_id: uuid.UUID, to_city_id: uuid.UUID
    ) -> Decimal: ...


class Catalog(Protocol):
    async def vendor_city_id(self, vendor_id: str) -> uuid.UUID: ...

    async def user(self, user_id: str) -> Any: ...


class OrderStore(Protocol):
    async def add(self, order: Order) -> None: ...

    async def get(
        self, order_id: uuid.UUID, *, for_update: bool = False
    ) -> Optional[Order]: ...

    async def by_checkout_key(self, buyer_id: str, key: str) -> list[Order]: ...

    async def for_buyer(self, buyer_id: str) -> list[Order]: ...

    async def for_vendor(self, vendor_id: str) -> list[Order]: ...


class TransactionScope(Protocol):
    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class OrderEvents(Protocol):
    async def order_created(self, order: Order, customer_name: str) -> None: ...

    async def status_changed(self, order: Order) -> None: ...

    async def delivered(self, order: Order) -> None: ...

    async def payment_received(self, order: Order) -> None: ...

    async def cancelled(self, order: Order, refunded: Optional[Decimal]) -> None: ...


# ---------------------------------------------------------------------------
# SQL order store
# ---------------------------------------------------------------------------


class SqlOrderStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, order: Order) -> None:
        self.db.add(order)
        await self.db.flush()

    async def get(
        self, order_id: uuid.UUID, *, for_update: bool = False
    ) -> Optional[Order]:
        query = select(Order).where(Order.id == order_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def by_checkout_key(self, buyer_id: str, key: str) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.buyer_id == buyer_id, Order.checkout_key == key)
            .order_by(Order.created_at, Order.id)
        )
        return list(result.scalars().all())

    async def for_buyer(self, buyer_id: str) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.buyer_id == buyer_id)
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    async def for_vendor(self, vendor_id: str) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.vendor_id == vendor_id)
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def _group_by_vendor(lines: list[CartLine]) -> "OrderedDict[str, list[CartLine]]":
    groups: OrderedDict[str, list[CartLine]] = OrderedDict()
    for line in lines:
        vendor_id = line.product.vendor_id
        if vendor_id is None:
            raise InvalidStateError(
                "Product has no vendor", product_id=str(line.product_id)
            )
        groups.setdefault(vendor_id, []).append(line)
    return groups


def _priced_items(lines: list[CartLine]) -> list[OrderItem]:
    """Snapshot each line's live discounted price into an OrderItem."""
    items = []
    for line in lines:
        unit_price = unit_price_of(line.product)
        if unit_price is None:
            raise InvalidStateError(
                "Product has no price and cannot be ordered",
                product_id=str(line.product_id),
            )
        items.append(
            OrderItem(
                id=uuid.uuid4(),
                product_id=line.product_id,
                product_name=line.product.name,
                quantity=line.quantity,
                price=unit_price,
                subtotal=line_subtotal(unit_price, line.quantity),
                size=line.size or None,
                color=line.color or None,
            )
        )
    return items


def _coerce_status(status: Union[OrderStatus, str]) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(
            "Invalid order status",
            status=str(status),
            allowed=[s.value for s in OrderStatus],
        )


class OrderOrchestrator:
    def __init__(
        self,
        *,
        carts: CartStore,
        ledger: WalletLedger,
        shipping: ShippingResolver,
        orders: OrderStore,
        catalog: Catalog,
        tx: TransactionScope,
        events: Optional[OrderEvents] = None,
    ):
        self.carts = carts
        self.ledger = ledger
        self.shipping = shipping
        self.orders = orders
        self.catalog = catalog
        self.tx = tx
        self.events = events

    # -- helpers -----------------------------------------------------------

    async def _emit(self, event: str, *args) -> None:
        if self.events is None:
            return
        try:
            await getattr(self.events, event)(*args)
        except Exception:
            logger.exception("Order notification %s failed", event)

    async def _shipping_price(
        self, from_city_id: uuid.UUID, to_city_id: uuid.UUID
    ) -> Decimal:
        try:
            return to_money(await self.shipping.price_of(from_city_id, to_city_id))
        except NotFoundError as exc:
            raise InvalidStateError(
                "No shipping lane between vendor city and destination",
                from_city_id=str(from_city_id),
                to_city_id=str(to_city_id),
            ) from exc

    async def _settle(self, order: Order, buyer_id: str) -> None:
        """Decide the payment status of a new order, deducting from the wallet."""
        if order.payment_method == PaymentMethod.CASH:
            order.payment_status = PaymentStatus.PAID
            order.remaining_amount = ZERO
            return

        balance = await self.ledger.balance(buyer_id)
        if balance <= 0:
            raise InvalidStateError(
                "Wallet balance is zero; choose another payment method",
                user_id=buyer_id,
            )
        if order.total <= 0:
            order.payment_status = PaymentStatus.PAID
            order.remaining_amount = ZERO
            return

        deduction = await self.ledger.deduct_partial(
            buyer_id,
            order.total,
            f"Payment for order {str(order.id)[:8]}",
            reference_type=ORDER_REFERENCE,
            reference_id=str(order.id),
        )
        remaining = to_money(deduction.remaining)
        if remaining > 0:
            order.payment_status = PaymentStatus.REMAINING
            order.remaining_amount = remaining
        else:
            order.payment_status = PaymentStatus.PAID
            order.remaining_amount = ZERO

    async def _refund_on_cancel(self, order: Order) -> Optional[Decimal]:
        """Return what was actually taken from the wallet and mark it refunded."""
        if order.payment_method != PaymentMethod.WALLET:
            return None

        if order.payment_status == PaymentStatus.PAID:
            amount = to_money(order.total)
        elif order.payment_status == PaymentStatus.REMAINING:
            amount = to_money(order.total - order.remaining_amount)
            order.remaining_amount = order.total
        else:
            return None

        if amount > 0:
            await self.ledger.refund(
                order.buyer_id,
                amount,
                f"Refund for cancelled order {str(order.id)[:8]}",
                reference_type=ORDER_REFERENCE,
                reference_id=str(order.id),
            )
        order.payment_status = PaymentStatus.REFUNDED
        logger.info("Refunded %s to %s for order %s", amount, order.buyer_id, order.id)
        return amount

    async def _load(self, order_id: uuid.UUID, *, for_update: bool = False) -> Order:
        order = await self.orders.get(order_id, for_update=for_update)
        if order is None:
            raise NotFoundError("Order not found", order_id=str(order_id))
        return order

    # -- checkout ----------------------------------------------------------

    async def create_order(
        self,
        buyer_id: str,
        *,
        to_city_id: uuid.UUID,
        phone: str,
        payment_method: Union[PaymentMethod, str],
        shipping_address: Optional[str] = None,
        checkout_key: Optional[str] = None,
    ) -> list[Order]:
        """Turn the buyer's cart into one order per vendor.

        All-or-nothing: a missing vendor city, a missing shipping lane, an
        unpriced product or a zero wallet balance in any group aborts the
        whole checkout and leaves wallet and cart untouched. When
        ``checkout_key`` matches an earlier checkout of the same buyer, the
        orders of that checkout are returned instead.

        The cart is locked before the key lookup and the cart read, so two
        checkouts of one buyer run one after the other.
        """
        try:
            payment_method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError(
                "Invalid payment method", payment_method=str(payment_method)
            )
        if not phone:
            raise ValidationError("Phone is required")

        try:
            await self.carts.lock(buyer_id)
            existing = (
                await self.orders.by_checkout_key(buyer_id, checkout_key)
                if checkout_key
                else []
            )
            if not existing:
                orders = await self._checkout(
                    buyer_id,
                    to_city_id=to_city_id,
                    phone=phone,
                    payment_method=payment_method,
                    shipping_address=shipping_address,
                    checkout_key=checkout_key,
                )
            await self.tx.commit()
        except Exception:
            await self.tx.rollback()
            raise

        if existing:
            logger.info(
                "Replaying checkout %s for %s (%d orders)",
                checkout_key,
                buyer_id,
                len(existing),
            )
            return existing

        logger.info(
            "Checkout for %s created %d order(s): %s",
            buyer_id,
            len(orders),
            ", ".join(str(order.id) for order in orders),
        )

        buyer = await self.catalog.user(buyer_id)
        customer_name = buyer.name if buyer is not None else buyer_id
        for order in orders:
            await self._emit("order_created", order, customer_name)
        return orders

    async def _checkout(
        self,
        buyer_id: str,
        *,
        to_city_id: uuid.UUID,
        phone: str,
        payment_method: PaymentMethod,
        shipping_address: Optional[str],
        checkout_key: Optional[str],
    ) -> list[Order]:
        lines = await self.carts.lines(buyer_id)
        if not lines:
            raise ValidationError("Cart is empty")

        groups = _group_by_vendor(lines)
        origins = {
            vendor_id: await self.catalog.vendor_city_id(vendor_id)
            for vendor_id in groups
        }

        orders = []
        for vendor_id, vendor_lines in groups.items():
            from_city_id = origins[vendor_id]
            shipping_price = await self._shipping_price(from_city_id, to_city_id)
            items = _priced_items(vendor_lines)
            subtotal = to_money(sum((item.subtotal for item in items), ZERO))

            now = utc_now()
            order = Order(
                id=uuid.uuid4(),
                buyer_id=buyer_id,
                vendor_id=vendor_id,
                status=OrderStatus.PENDING,
                subtotal=subtotal,
                shipping_price=shipping_price,
                total=to_money(subtotal + shipping_price),
                from_city_id=from_city_id,
                to_city_id=to_city_id,
                shipping_address=shipping_address,
                phone=phone,
                payment_method=payment_method,
                payment_status=PaymentStatus.PENDING,
                remaining_amount=ZERO,
                checkout_key=checkout_key,
                items=items,
                created_at=now,
                updated_at=now,
            )
            await self._settle(order, buyer_id)
            await self.orders.add(order)
            orders.append(order)

        await self.carts.clear(buyer_id)
        return orders

    async def price_quote(
        self, buyer_id: str, to_city_id: uuid.UUID
    ) -> PriceQuoteResponse:
        """Price the current cart without touching any state.

        A vendor group without a shipping lane is reported as unavailable
        and makes ``can_checkout`` false; its shipping is never assumed
        free.
        """
        lines = await self.carts.lines(buyer_id)
        if not lines:
            raise ValidationError("Cart is empty")

        groups = []
        products_total = ZERO
        shipping_total = ZERO
        for vendor_id, vendor_lines in _group_by_vendor(lines).items():
            from_city_id = await self.catalog.vendor_city_id(vendor_id)
            items = _priced_items(vendor_lines)
            subtotal = to_money(sum((item.subtotal for item in items), ZERO))
            products_total += subtotal

            try:
                shipping_price = await self._shipping_price(from_city_id, to_city_id)
            except InvalidStateError:
                shipping_price = None
            else:
                shipping_total += shipping_price

            groups.append(
                VendorQuote(
                    vendor_id=vendor_id,
                    from_city_id=from_city_id,
                    to_city_id=to_city_id,
                    items=[
                        QuoteItem(
                            product_id=item.product_id,
                            product_name=item.product_name,
                            quantity=item.quantity,
                            unit_price=item.price,
                            subtotal=item.subtotal,
                            size=item.size,
                            color=item.color,
                        )
                        for item in items
                    ],
                    products_subtotal=subtotal,
                    shipping_available=shipping_price is not None,
                    shipping_price=shipping_price,
                    total=(
                        to_money(subtotal + shipping_price)
                        if shipping_price is not None
                        else None
                    ),
                )
            )

        grand_total = to_money(products_total + shipping_total)
        balance = to_money(await self.ledger.balance(buyer_id))
        from_wallet = min(balance, grand_total)
        remaining = to_money(grand_total - from_wallet)

        return PriceQuoteResponse(
            groups=groups,
            products_total=to_money(products_total),
            shipping_total=to_money(shipping_total),
            grand_total=grand_total,
            can_checkout=all(group.shipping_available for group in groups),
            wallet=WalletQuote(
                balance=balance,
                can_pay_with_wallet=balance > 0,
                sufficient_balance=balance >= grand_total,
                amount_from_wallet=from_wallet,
                remaining_after_payment=remaining,
                needs_additional_payment=remaining > 0,
            ),
        )

    # -- lifecycle ---------------------------------------------------------

    async def update_status(
        self,
        order_id: uuid.UUID,
        new_status: Union[OrderStatus, str],
        actor: AuthUser,
    ) -> Order:
        """Move an order along its lifecycle. Admins and the order's vendor only."""
        refunded = None
        try:
            order = await self._load(order_id, for_update=True)
            if not actor.is_admin and actor.user_id != order.vendor_id:
                raise AuthorizationError(
                    "Not allowed to update this order", order_id=str(order_id)
                )
            new_status = _coerce_status(new_status)
            if not can_transition(order.status, new_status):
                raise InvalidStateError(
                    f"Cannot change order status from {order.status.value} "
                    f"to {new_status.value}",
                    current=order.status.value,
                    requested=new_status.value,
                )

            if new_status == OrderStatus.CANCELLED:
                refunded = await self._refund_on_cancel(order)
            previous = order.status
            order.status = new_status
            order.updated_at = utc_now()
            await self.tx.commit()
        except Exception:
            await self.tx.rollback()
            raise

        logger.info(
            "Order %s status %s -> %s by %s",
            order.id,
            previous.value,
            new_status.value,
            actor.user_id,
        )

        if new_status == OrderStatus.CANCELLED:
            await self._emit("cancelled", order, refunded)
            return order

        await self._emit("status_changed", order)
        if new_status == OrderStatus.DELIVERED:
            await self._emit("delivered", order)
            if order.payment_status == PaymentStatus.PAID:
                await self._emit("payment_received", order)
        return order

    async def cancel_order(self, order_id: uuid.UUID, buyer_id: str) -> Order:
        """Buyer cancellation, refunding whatever the wallet paid."""
        try:
            order = await self._load(order_id, for_update=True)
            if order.buyer_id != buyer_id:
                raise AuthorizationError(
                    "Not allowed to cancel this order", order_id=str(order_id)
                )
            if order.status in TERMINAL_STATUSES:
                raise InvalidStateError(
                    f"Cannot cancel an order that is {order.status.value}",
                    status=order.status.value,
                )

            refunded = await self._refund_on_cancel(order)
            order.status = OrderStatus.CANCELLED
            order.updated_at = utc_now()
            await self.tx.commit()
        except Exception:
            await self.tx.rollback()
            raise

        logger.info("Order %s cancelled by buyer %s", order.id, buyer_id)
        await self._emit("cancelled", order, refunded)
        return order

    # -- reads -------------------------------------------------------------

    async def get_order(self, order_id: uuid.UUID, actor: AuthUser) -> Order:
        order = await self._load(order_id)
        if not (
            actor.is_admin or actor.user_id in (order.buyer_id, order.vendor_id)
        ):
            raise AuthorizationError(
                "Not allowed to view this order", order_id=str(order_id)
            )
        return order

    async def list_for_buyer(self, buyer_id: str) -> list[Order]:
        return await self.orders.for_buyer(buyer_id)

    async def list_for_vendor(self, vendor_id: str) -> list[Order]:
        return await self.orders.for_vendor(vendor_id)


def build_orchestrator(
    db: AsyncSession,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> OrderOrchestrator:
    """Wire the SQL collaborators around one request session."""
    events = None
    if session_factory is not None:
        events = OrderNotifier(NotificationSink(session_factory), settings.CURRENCY)
    return OrderOrchestrator(
        carts=SqlCartStore(db),
        ledger=SqlWalletLedger(db),
        shipping=SqlShippingResolver(db),
        orders=SqlOrderStore(db),
        catalog=SqlCatalog(db),
        tx=db,
        events=events,
    )
