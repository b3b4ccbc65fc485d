"""Formatting of resolved units into the webhook response."""

from __future__ import annotations

from typing import Sequence

from .models import LineTaxResponse, OrderTaxResponse, UnitResult
from .money import format_amount, format_rate


def assemble(shipping_result: UnitResult, line_results: Sequence[UnitResult]) -> OrderTaxResponse:
    """
    Build the response, rounding every amount exactly once.

    Lines come out in the order they were given, one entry per result, even
    when several lines share an identity.
    """
    lines = [
        LineTaxResponse(
            total_net_amount=format_amount(result.net_amount),
            total_gross_amount=format_amount(result.gross_amount),
            tax_rate=format_rate(result.tax_rate),
        )
        for result in line_results
    ]
    return OrderTaxResponse(
        shipping_price_net_amount=format_amount(shipping_result.net_amount),
        shipping_price_gross_amount=format_amount(shipping_result.gross_amount),
        shipping_tax_rate=format_rate(shipping_result.tax_rate),
        lines=lines,
    )
