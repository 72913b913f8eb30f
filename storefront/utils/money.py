# storefront/utils/money.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

MINOR_UNITS = 100

def D(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_half_up(x) -> int:
    return int(D(x).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def to_minor_units(amount) -> int:
    """1499.99 -> 149999. Each amount is rounded on its own."""
    return round_half_up(D(amount) * MINOR_UNITS)

def to_major_units(minor: int) -> float:
    return minor / MINOR_UNITS

def line_total(price, quantity: int = 1) -> int:
    return to_minor_units(price) * quantity

def cart_total(lines: Iterable[tuple]) -> int:
    """Sum of (price, quantity) lines in minor units, rounding per line before summing."""
    return sum(line_total(price, quantity) for price, quantity in lines)

def percentage_of(total: int, percentage) -> int:
    """Discount on an already-summed minor-unit total, rounded once."""
    return round_half_up(D(total) * D(percentage) / 100)
