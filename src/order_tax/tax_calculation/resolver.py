"""Net/gross derivation for a single discounted unit."""

from __future__ import annotations

from decimal import Decimal

from .models import UnitResult
from .money import ONE, ZERO, ensure_non_negative


def resolve(
    discounted_amount: Decimal,
    tax_exempt: bool,
    rate: Decimal,
    prices_entered_with_tax: bool,
    identity: str = "",
) -> UnitResult:
    """
    Turn a unit's discounted amount into its (net, gross, rate) triple.

    With prices entered with tax the discounted amount is gross and net is
    backed out of it; otherwise it is net and gross is built on top of it.
    Exempt units and zero rates carry no tax at all.
    """
    if tax_exempt or rate == ZERO:
        return UnitResult(identity, discounted_amount, discounted_amount, ZERO)

    ensure_non_negative(rate, f"tax rate of {identity or 'unit'}")
    multiplier = ONE + rate
    if prices_entered_with_tax:
        gross = discounted_amount
        net = gross / multiplier
    else:
        net = discounted_amount
        gross = net * multiplier
    return UnitResult(identity, net, gross, rate)
