"""Proportional allocation of order-level discounts across taxable units."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Sequence

from ..utils.logging import get_logger
from .errors import DivisionByZero, InvalidTaxInput
from .models import AllocatedUnit, Discount, TaxableUnit
from .money import ZERO, ensure_non_negative

logger = get_logger(__name__)

OVERFLOW_ALLOW = "allow"
OVERFLOW_CLAMP = "clamp"
OVERFLOW_POLICIES = (OVERFLOW_ALLOW, OVERFLOW_CLAMP)


def total_discount(discounts: Sequence[Discount]) -> Decimal:
    """Sum of all discount amounts; zero for an empty list."""
    total = ZERO
    for discount in discounts:
        total += ensure_non_negative(discount.amount, "discount amount")
    return total


def allocate(
    units: Sequence[TaxableUnit],
    discounts: Sequence[Discount],
    overflow: str = OVERFLOW_ALLOW,
) -> List[AllocatedUnit]:
    """
    Spread the order's discounts over every unit in proportion to its raw amount.

    Weights are the as-entered raw amounts of shipping and all lines, taxed or
    exempt alike, so the split does not depend on the price-entry basis.
    Results keep the input order and are computed at full precision.

    Args:
        units: Shipping and lines, in the order the caller wants them back
        discounts: Anonymous order-level discounts
        overflow: "allow" lets a share larger than the unit drive it
            negative; "clamp" floors the discounted amount at zero

    Returns:
        One AllocatedUnit per input unit, positionally aligned

    Raises:
        DivisionByZero: If there is a discount to spread but the raw total is zero
        InvalidTaxInput: On negative amounts or an unknown overflow policy
    """
    if overflow not in OVERFLOW_POLICIES:
        raise InvalidTaxInput(f"Unknown discount overflow policy: {overflow!r}")

    discount_total = total_discount(discounts)
    raw_total = ZERO
    for unit in units:
        raw_total += ensure_non_negative(unit.raw_amount, f"raw amount of {unit.identity}")

    if raw_total == ZERO:
        if discount_total > ZERO:
            raise DivisionByZero(discount_total)
        return [AllocatedUnit(unit, ZERO, unit.raw_amount) for unit in units]

    logger.debug(f"Allocating discount {discount_total} over raw total {raw_total}")

    allocated = []
    for unit in units:
        share = discount_total * (unit.raw_amount / raw_total)
        discounted = unit.raw_amount - share
        if overflow == OVERFLOW_CLAMP and discounted < ZERO:
            discounted = ZERO
        allocated.append(AllocatedUnit(unit, share, discounted))
    return allocated
