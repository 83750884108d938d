"""Money helpers.

All amounts are ``Decimal`` with two fractional digits, rounded half-up.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Coerce to a 2-place Decimal (floats go through ``str`` first)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def discounted_price(price: Number, discount_percent: Number = 0) -> Decimal:
    """Unit price after a percentage discount, rounded to cents."""
    price = Decimal(str(price)) if isinstance(price, float) else Decimal(price)
    discount = Decimal(str(discount_percent or 0))
    return to_money(price * (Decimal(100) - discount) / Decimal(100))


def line_subtotal(unit_price: Number, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)
