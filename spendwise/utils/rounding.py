"""Half-up rounding for money and percentage figures"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, float, int]

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs from dragging their binary expansion along
    return Decimal(str(value))


def round_money(value: Number) -> float:
    """Round to 2 decimal places"""
    return float(_as_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def round_percentage(value: Number) -> float:
    """Round to 1 decimal place"""
    return float(_as_decimal(value).quantize(_TENTH, rounding=ROUND_HALF_UP))


def round_whole(value: Number) -> int:
    """Round to the nearest integer, used in human-readable message text"""
    return int(_as_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
