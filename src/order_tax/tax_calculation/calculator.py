"""Order tax calculation service: allocate, resolve, assemble."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..utils.config import Config
from ..utils.logging import get_logger
from .allocation import OVERFLOW_ALLOW, allocate
from .assembler import assemble
from .errors import InvalidTaxInput
from .models import AllocatedUnit, OrderTaxContext, OrderTaxResponse, UnitResult
from .money import ZERO, quantize_money
from .payload import parse_tax_base
from .rates import FlatRateResolver, RateResolver
from .resolver import resolve

logger = get_logger(__name__)

ROUND_FINAL = "final"
ROUND_DISCOUNTED = "discounted"
ROUNDING_STAGES = (ROUND_FINAL, ROUND_DISCOUNTED)


class OrderTaxCalculator:
    """Computes the webhook response for one order at a time.

    Holds only configuration, so a single instance can serve concurrent
    requests. With the "final" rounding stage every amount is rounded once,
    when the response is formatted; "discounted" additionally rounds each
    discounted amount to cents before net/gross are derived from it.
    """

    def __init__(
        self,
        rate_resolver: Optional[RateResolver] = None,
        discount_overflow: str = OVERFLOW_ALLOW,
        rounding_stage: str = ROUND_FINAL,
    ):
        if rounding_stage not in ROUNDING_STAGES:
            raise InvalidTaxInput(f"Unknown rounding stage: {rounding_stage!r}")
        self.rate_resolver = rate_resolver or FlatRateResolver()
        self.discount_overflow = discount_overflow
        self.rounding_stage = rounding_stage

    @classmethod
    def from_config(cls, config: Config) -> "OrderTaxCalculator":
        """Build a calculator with a flat rate resolver from configuration."""
        resolver = FlatRateResolver(
            rate=config.get("default_tax_rate", ZERO),
            shipping_rate=config.get("shipping_tax_rate"),
        )
        return cls(
            rate_resolver=resolver,
            discount_overflow=config.get("discount_overflow", OVERFLOW_ALLOW),
            rounding_stage=config.get("rounding_stage", ROUND_FINAL),
        )

    def _resolve_unit(self, allocated: AllocatedUnit, prices_entered_with_tax: bool, is_shipping: bool) -> UnitResult:
        unit = allocated.unit
        if unit.tax_exempt:
            rate = ZERO
        elif is_shipping:
            rate = self.rate_resolver.rate_for_shipping(unit)
        else:
            rate = self.rate_resolver.rate_for_line(unit)
        discounted = allocated.discounted_amount
        if self.rounding_stage == ROUND_DISCOUNTED:
            discounted = quantize_money(discounted)
        return resolve(
            discounted,
            unit.tax_exempt,
            rate,
            prices_entered_with_tax,
            identity=unit.identity,
        )

    def resolve_units(self, context: OrderTaxContext) -> List[UnitResult]:
        """Allocate discounts and resolve every unit; shipping comes first."""
        allocated = allocate(context.units, context.discounts, overflow=self.discount_overflow)
        results = []
        for index, unit in enumerate(allocated):
            result = self._resolve_unit(unit, context.prices_entered_with_tax, is_shipping=index == 0)
            logger.debug(
                f"{result.identity}: raw={unit.unit.raw_amount} share={unit.discount_share} "
                f"net={result.net_amount} gross={result.gross_amount} rate={result.tax_rate}"
            )
            results.append(result)
        return results

    def calculate(self, context: OrderTaxContext) -> OrderTaxResponse:
        """Compute the formatted shipping and line breakdown for an order."""
        results = self.resolve_units(context)
        response = assemble(results[0], results[1:])
        logger.info(
            f"Calculated taxes for {len(context.lines)} line(s), "
            f"{len(context.discounts)} discount(s), "
            f"prices entered with tax: {context.prices_entered_with_tax}"
        )
        return response

    def calculate_from_payload(self, body: Mapping[str, Any]) -> OrderTaxResponse:
        """Parse a CalculateTaxes body and compute its response."""
        return self.calculate(parse_tax_base(body))

    def calculate_to_dict(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        return self.calculate_from_payload(body).to_dict()
