"""Money helpers

All currency values are Decimal quantised to cents. Processor calls work in
integer minor units.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# |net| below this is treated as exactly settled
SETTLED_TOLERANCE = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce a numeric (or None from an empty SUM) to a cent-quantised Decimal"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(value: Decimal) -> int:
    return int((to_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(value: int) -> Decimal:
    return to_money(Decimal(value) / 100)
