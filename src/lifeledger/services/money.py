"""Decimal helpers for monetary values."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
UNBOUNDED = Decimal("Infinity")


def to_decimal(value: Number | None, default: Decimal = ZERO) -> Decimal:
    """Coerce *value* into a Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather than
    its binary expansion. ``None``, unparseable input and NaN return *default*.
    Infinity is only kept when it is already a Decimal, as with ``UNBOUNDED``;
    parsed text or floats must be finite.
    """

    if value is None:
        return default
    if isinstance(value, Decimal):
        return default if value.is_nan() else value
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return amount if amount.is_finite() else default


def quantize_money(value: Number) -> Decimal:
    """Round to cents using half-up rounding."""

    amount = to_decimal(value)
    if not amount.is_finite():
        return amount
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_rate(annual_rate: Number) -> Decimal:
    """Convert an annual fractional rate into a monthly one; negatives clamp to zero."""

    return max(to_decimal(annual_rate), ZERO) / Decimal(12)


__all__ = [
    "CENT",
    "HUNDRED",
    "Number",
    "UNBOUNDED",
    "ZERO",
    "monthly_rate",
    "quantize_money",
    "to_decimal",
]
