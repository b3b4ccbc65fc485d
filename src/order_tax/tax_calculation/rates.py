"""Tax rate resolution for taxed units."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import TaxableUnit
from .money import ZERO, ensure_non_negative, to_decimal


class RateResolver:
    """Supplies the fractional tax rate (0.23 for 23%) of a taxed unit.

    Only called for units that are not tax-exempt.
    """

    def rate_for_line(self, line: TaxableUnit) -> Decimal:
        raise NotImplementedError

    def rate_for_shipping(self, shipping: TaxableUnit) -> Decimal:
        raise NotImplementedError


class FlatRateResolver(RateResolver):
    """One rate for every line, and the same or a separate one for shipping."""

    def __init__(self, rate=ZERO, shipping_rate=None) -> None:
        self.rate = ensure_non_negative(to_decimal(rate, "tax rate"), "tax rate")
        self.shipping_rate: Optional[Decimal] = None
        if shipping_rate is not None:
            self.shipping_rate = ensure_non_negative(
                to_decimal(shipping_rate, "shipping tax rate"), "shipping tax rate"
            )

    def rate_for_line(self, line: TaxableUnit) -> Decimal:
        return self.rate

    def rate_for_shipping(self, shipping: TaxableUnit) -> Decimal:
        if self.shipping_rate is None:
            return self.rate
        return self.shipping_rate

    def __repr__(self) -> str:
        return f"FlatRateResolver(rate={self.rate}, shipping_rate={self.shipping_rate})"
