# storefront/domain/money.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Fixed point, 2 decimals, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(price: Decimal, quantity: int) -> Decimal:
    return to_money(Decimal(price) * quantity)


def order_total(lines: Iterable[tuple[Decimal, int]]) -> Decimal:
    # sum of already rounded subtotals, so lines always add up to the total
    return sum((line_subtotal(price, qty) for price, qty in lines), Decimal("0.00"))
