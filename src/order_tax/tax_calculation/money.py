"""Decimal helpers shared by the allocator, resolver and assembler."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import InvalidTaxInput

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce a JSON number (int, float or numeric string) to Decimal.

    Floats go through ``str`` so that 12.3 becomes Decimal("12.3") rather
    than its binary expansion.

    Raises:
        InvalidTaxInput: If the value is missing, boolean or not numeric.
    """
    if isinstance(value, Decimal):
        result = value
    elif value is None or isinstance(value, bool):
        raise InvalidTaxInput(f"{field} must be a number, got {value!r}")
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidTaxInput(f"{field} must be a number, got {value!r}") from exc
    if not result.is_finite():
        raise InvalidTaxInput(f"{field} must be finite, got {value!r}")
    return result


def ensure_non_negative(value: Decimal, field: str) -> Decimal:
    if value < ZERO:
        raise InvalidTaxInput(f"{field} must not be negative, got {value}")
    return value


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero, without producing negative zero.

    Raises:
        InvalidTaxInput: If the amount has too many digits to carry cents
    """
    try:
        rounded = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidTaxInput(f"Amount {value} is too large to express in cents") from exc
    if rounded.is_zero():
        return abs(rounded)
    return rounded


def format_amount(value: Decimal) -> str:
    return str(quantize_money(value))


def format_rate(rate: Decimal) -> str:
    """Render a fractional rate as a two-decimal percentage (0.23 -> "23.00")."""
    return format_amount(rate * HUNDRED)
