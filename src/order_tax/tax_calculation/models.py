"""Transient value objects for one order-tax request."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

SHIPPING_IDENTITY = "shipping"


@dataclass(frozen=True)
class TaxableUnit:
    """Shipping fee or a single order line.

    ``raw_amount`` is in the order's entry basis: gross when prices were
    entered with tax, net otherwise.
    """

    identity: str
    raw_amount: Decimal
    tax_exempt: bool = False
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Discount:
    amount: Decimal


@dataclass(frozen=True)
class OrderTaxContext:
    prices_entered_with_tax: bool
    lines: List[TaxableUnit]
    shipping: TaxableUnit
    discounts: List[Discount] = field(default_factory=list)

    @property
    def units(self) -> List[TaxableUnit]:
        """Shipping followed by every line, the allocation base."""
        return [self.shipping, *self.lines]


@dataclass(frozen=True)
class AllocatedUnit:
    unit: TaxableUnit
    discount_share: Decimal
    discounted_amount: Decimal

    @property
    def identity(self) -> str:
        return self.unit.identity


@dataclass(frozen=True)
class UnitResult:
    identity: str
    net_amount: Decimal
    gross_amount: Decimal
    tax_rate: Decimal


@dataclass(frozen=True)
class LineTaxResponse:
    total_net_amount: str
    total_gross_amount: str
    tax_rate: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "total_net_amount": self.total_net_amount,
            "total_gross_amount": self.total_gross_amount,
            "tax_rate": self.tax_rate,
        }


@dataclass(frozen=True)
class OrderTaxResponse:
    shipping_price_net_amount: str
    shipping_price_gross_amount: str
    shipping_tax_rate: str
    lines: List[LineTaxResponse]

    def to_dict(self) -> Dict[str, Any]:
        """Webhook response body."""
        return {
            "shipping_price_net_amount": self.shipping_price_net_amount,
            "shipping_price_gross_amount": self.shipping_price_gross_amount,
            "shipping_tax_rate": self.shipping_tax_rate,
            "lines": [line.to_dict() for line in self.lines],
        }
