"""Decimal helpers for money amounts."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")
INFINITY = Decimal("Infinity")


def to_money(value: Decimal | int | str) -> Decimal:
    """Round to the currency minor unit (half-up)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def total(values: Iterable[Decimal]) -> Decimal:
    """Sum of Decimals that stays a Decimal for an empty iterable."""
    return sum(values, ZERO)
