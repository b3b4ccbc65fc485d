"""Parsing of CalculateTaxes webhook bodies into an OrderTaxContext."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping

from .errors import InvalidPayload
from .models import SHIPPING_IDENTITY, Discount, OrderTaxContext, TaxableUnit
from .money import ZERO, ensure_non_negative, to_decimal


def _money_amount(container: Any, field: str) -> Any:
    """Read ``{"amount": x}``; a missing container means zero."""
    if container is None:
        return ZERO
    if not isinstance(container, Mapping):
        raise InvalidPayload(f"{field} must be an object with an amount")
    return container.get("amount", ZERO)


def _amount(value: Any, field: str) -> Decimal:
    return ensure_non_negative(to_decimal(value, field), field)


def _line_identity(line: Mapping[str, Any], position: int) -> str:
    source_line = line.get("sourceLine") or {}
    if isinstance(source_line, Mapping) and source_line.get("id"):
        return str(source_line["id"])
    if line.get("id"):
        return str(line["id"])
    return f"line-{position}"


def _parse_line(line: Any, position: int) -> TaxableUnit:
    if not isinstance(line, Mapping):
        raise InvalidPayload(f"lines[{position}] must be an object")
    identity = _line_identity(line, position)
    raw_amount = _amount(_money_amount(line.get("totalPrice"), "totalPrice"), f"totalPrice of {identity}")
    charge_taxes = line.get("chargeTaxes", True)
    return TaxableUnit(
        identity=identity,
        raw_amount=raw_amount,
        tax_exempt=charge_taxes is False,
        payload=dict(line),
    )


def _parse_discounts(discounts: Any) -> List[Discount]:
    if discounts is None:
        return []
    if not isinstance(discounts, list):
        raise InvalidPayload("discounts must be a list")
    parsed = []
    for index, discount in enumerate(discounts):
        if not isinstance(discount, Mapping):
            raise InvalidPayload(f"discounts[{index}] must be an object")
        amount = _money_amount(discount.get("amount"), f"discounts[{index}].amount")
        parsed.append(Discount(_amount(amount, f"discounts[{index}] amount")))
    return parsed


def extract_tax_base(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the ``taxBase`` object of a webhook body, or the body itself if it is one."""
    if not isinstance(body, Mapping):
        raise InvalidPayload("Request body must be a JSON object")
    if "taxBase" in body:
        tax_base = body["taxBase"]
        if not isinstance(tax_base, Mapping):
            raise InvalidPayload("taxBase must be an object")
        return dict(tax_base)
    if "lines" in body:
        return dict(body)
    raise InvalidPayload("Request body has no taxBase")


def parse_tax_base(body: Mapping[str, Any]) -> OrderTaxContext:
    """
    Build the engine input from a CalculateTaxes body.

    Accepts the full webhook body or a bare ``taxBase``. Line identity is
    ``sourceLine.id``, then ``id``, then the position; ``chargeTaxes: false``
    marks a line exempt. The whole line is kept as an opaque payload.

    Raises:
        InvalidPayload: On structural problems
        InvalidTaxInput: On non-numeric or negative amounts
    """
    tax_base = extract_tax_base(body)

    lines = tax_base.get("lines")
    if lines is None:
        lines = []
    if not isinstance(lines, list):
        raise InvalidPayload("lines must be a list")

    shipping_amount = _money_amount(tax_base.get("shippingPrice"), "shippingPrice")
    shipping = TaxableUnit(
        identity=SHIPPING_IDENTITY,
        raw_amount=_amount(shipping_amount, "shippingPrice"),
    )

    return OrderTaxContext(
        prices_entered_with_tax=tax_base.get("pricesEnteredWithTax", True) is not False,
        lines=[_parse_line(line, index) for index, line in enumerate(lines)],
        shipping=shipping,
        discounts=_parse_discounts(tax_base.get("discounts")),
    )
