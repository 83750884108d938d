"""Orchestrator tests against in-memory collaborators.

These pin down the transaction and notification contract without a
database: one commit per successful call, a rollback on any failure, and
notification errors that never reach the caller.
"""

import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from libs.common.errors import InvalidStateError, NotFoundError
from libs.common.money import to_money
from services.store_service.models import PaymentMethod, PaymentStatus
from services.store_service.services.order_ops import OrderOrchestrator

CAIRO = uuid.uuid4()
ALEX = uuid.uuid4()
GIZA = uuid.uuid4()


def _line(vendor_id, price, quantity=1, name="Item"):
    product = SimpleNamespace(
        id=uuid.uuid4(),
        name=name,
        vendor_id=vendor_id,
        price=Decimal(price),
        is_price=True,
        discount=Decimal("0"),
    )
    return SimpleNamespace(
        product=product, product_id=product.id, quantity=quantity, size="", color=""
    )


class FakeCarts:
    def __init__(self, lines):
        self._lines = list(lines)
        self.cleared = False
        self.locked = []

    async def lock(self, user_id):
        self.locked.append(user_id)

    async def lines(self, user_id):
        return list(self._lines)

    async def clear(self, user_id):
        self.cleared = True
        return len(self._lines)


class FakeLedger:
    def __init__(self, balance="0"):
        self._balance = Decimal(balance)
        self.deductions = []
        self.refunds = []

    async def balance(self, user_id):
        return self._balance

    async def deduct_partial(self, user_id, amount, description, reference_type=None, reference_id=None):
        deducted = min(self._balance, amount)
        self._balance -= deducted
        self.deductions.append(deducted)
        return SimpleNamespace(deducted=deducted, remaining=to_money(amount - deducted))

    async def refund(self, user_id, amount, description, reference_type=None, reference_id=None):
        self._balance += amount
        self.refunds.append(amount)


class FakeShipping:
    def __init__(self, lanes):
        self.lanes = lanes

    async def price_of(self, from_city_id, to_city_id):
        try:
            return self.lanes[(from_city_id, to_city_id)]
        except KeyError:
            raise NotFoundError("Shipping price not found for this route")


class FakeCatalog:
    cities = {"vendor-a": CAIRO, "vendor-b": ALEX}

    async def vendor_city_id(self, vendor_id):
        return self.cities[vendor_id]

    async def user(self, user_id):
        return SimpleNamespace(id=user_id, name="Buyer")


class FakeOrders:
    def __init__(self):
        self.saved = {}

    async def add(self, order):
        self.saved[order.id] = order

    async def get(self, order_id, *, for_update=False):
        return self.saved.get(order_id)

    async def by_checkout_key(self, buyer_id, key):
        return [
            o for o in self.saved.values() if o.buyer_id == buyer_id and o.checkout_key == key
        ]

    async def for_buyer(self, buyer_id):
        return [o for o in self.saved.values() if o.buyer_id == buyer_id]

    async def for_vendor(self, vendor_id):
        return [o for o in self.saved.values() if o.vendor_id == vendor_id]


class FakeTx:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class ExplodingEvents:
    def __init__(self):
        self.calls = 0

    async def order_created(self, order, customer_name):
        self.calls += 1
        raise RuntimeError("notification backend down")

    async def cancelled(self, order, refunded):
        self.calls += 1
        raise RuntimeError("notification backend down")


def _build(lines, *, balance="0", lanes=None, events=None):
    parts = SimpleNamespace(
        carts=FakeCarts(lines),
        ledger=FakeLedger(balance),
        shipping=FakeShipping(lanes if lanes is not None else {(CAIRO, GIZA): Decimal("10")}),
        orders=FakeOrders(),
        catalog=FakeCatalog(),
        tx=FakeTx(),
    )
    orchestrator = OrderOrchestrator(
        carts=parts.carts,
        ledger=parts.ledger,
        shipping=parts.shipping,
        orders=parts.orders,
        catalog=parts.catalog,
        tx=parts.tx,
        events=events,
    )
    return orchestrator, parts


async def _create(orchestrator, method=PaymentMethod.WALLET):
    return await orchestrator.create_order(
        "buyer", to_city_id=GIZA, phone="0100", payment_method=method
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_success_commits_once_and_clears_cart():
    orchestrator, parts = _build([_line("vendor-a", "40")], balance="100")

    orders = await _create(orchestrator)

    assert parts.tx.commits == 1
    assert parts.tx.rollbacks == 0
    assert parts.carts.cleared
    assert parts.carts.locked == ["buyer"]
    assert orders[0].total == Decimal("50.00")
    assert parts.ledger.deductions == [Decimal("50.00")]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failure_rolls_back_and_keeps_cart():
    lines = [_line("vendor-a", "40"), _line("vendor-b", "10")]
    orchestrator, parts = _build(lines, balance="100")

    with pytest.raises(InvalidStateError):
        await _create(orchestrator)

    assert parts.tx.commits == 0
    assert parts.tx.rollbacks == 1
    assert not parts.carts.cleared


@pytest.mark.asyncio
@pytest.mark.unit
async def test_notifier_failure_does_not_undo_order():
    events = ExplodingEvents()
    orchestrator, parts = _build([_line("vendor-a", "5")], events=events)

    orders = await _create(orchestrator, PaymentMethod.CASH)

    assert events.calls == 1
    assert parts.tx.commits == 1
    assert parts.tx.rollbacks == 0
    assert list(parts.orders.saved) == [orders[0].id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_with_failing_notifier_still_refunds():
    events = ExplodingEvents()
    orchestrator, parts = _build([_line("vendor-a", "30")], balance="100", events=events)
    order = (await _create(orchestrator))[0]

    cancelled = await orchestrator.cancel_order(order.id, "buyer")

    assert cancelled.payment_status == PaymentStatus.REFUNDED
    assert parts.ledger.refunds == [Decimal("40.00")]
    assert parts.tx.commits == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_group_sees_balance_left_by_first():
    """Group one drains the wallet, so group two hits a zero balance."""
    lanes = {(CAIRO, GIZA): Decimal("10"), (ALEX, GIZA): Decimal("10")}
    lines = [_line("vendor-a", "90"), _line("vendor-b", "10")]
    orchestrator, parts = _build(lines, balance="100", lanes=lanes)

    with pytest.raises(InvalidStateError):
        await _create(orchestrator)

    assert parts.tx.rollbacks == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remaining_amount_bounded_by_total():
    orchestrator, parts = _build([_line("vendor-a", "190")], balance="0.01")

    order = (await _create(orchestrator))[0]

    assert order.payment_status == PaymentStatus.REMAINING
    assert order.remaining_amount == Decimal("199.99")
    assert order.remaining_amount <= order.total
