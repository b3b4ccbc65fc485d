"""End-to-end calculation scenarios at a 23% rate."""

from decimal import Decimal

import pytest

from order_tax.tax_calculation.calculator import ROUND_DISCOUNTED, OrderTaxCalculator
from order_tax.tax_calculation.errors import DivisionByZero, InvalidTaxInput
from order_tax.tax_calculation.rates import FlatRateResolver

from conftest import RATE

DISCOUNTS = [{"amount": {"amount": 2}}, {"amount": {"amount": 1}}]


def _line(data):
    return (data["total_net_amount"], data["total_gross_amount"], data["tax_rate"])


def _shipping(data):
    return (
        data["shipping_price_net_amount"],
        data["shipping_price_gross_amount"],
        data["shipping_tax_rate"],
    )


class TestOrderTaxCalculator:
    """Test cases for OrderTaxCalculator."""

    def test_single_line_without_discounts(self, calculator, order_payload):
        data = calculator.calculate_to_dict(order_payload)
        assert _shipping(data) == ("10.00", "12.30", "23.00")
        assert len(data["lines"]) == 1
        assert _line(data["lines"][0]) == ("48.78", "60.00", "23.00")

    def test_discounts_propagate_over_lines(self, calculator, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["discounts"] = DISCOUNTS
        tax_base["lines"].append(second_line(totalPrice={"amount": 20}))

        data = calculator.calculate_to_dict(order_payload)

        assert _shipping(data) == ("9.67", "11.90", "23.00")
        assert data["lines"][0]["total_gross_amount"] == "58.05"
        # 58.0498.../1.23 = 47.19499... when rounded only once
        assert data["lines"][0]["total_net_amount"] == "47.19"
        assert _line(data["lines"][1]) == ("15.73", "19.35", "23.00")

    def test_discounted_rounding_stage(self, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["discounts"] = DISCOUNTS
        tax_base["lines"].append(second_line(totalPrice={"amount": 20}))
        calculator = OrderTaxCalculator(FlatRateResolver(RATE), rounding_stage=ROUND_DISCOUNTED)

        data = calculator.calculate_to_dict(order_payload)

        assert _shipping(data) == ("9.67", "11.90", "23.00")
        assert _line(data["lines"][0]) == ("47.20", "58.05", "23.00")
        assert _line(data["lines"][1]) == ("15.73", "19.35", "23.00")

    def test_net_prices_with_exempt_line(self, calculator, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["pricesEnteredWithTax"] = False
        tax_base["discounts"] = DISCOUNTS
        tax_base["lines"].append(second_line(totalPrice={"amount": 20}, chargeTaxes=False))

        data = calculator.calculate_to_dict(order_payload)

        assert _shipping(data) == ("11.90", "14.64", "23.00")
        assert _line(data["lines"][0]) == ("58.05", "71.40", "23.00")
        assert _line(data["lines"][1]) == ("19.35", "19.35", "0.00")

    def test_exempt_line_without_discounts(self, calculator, order_payload, second_line):
        order_payload["taxBase"]["lines"].append(second_line(chargeTaxes=False))

        data = calculator.calculate_to_dict(order_payload)

        assert _line(data["lines"][0]) == ("48.78", "60.00", "23.00")
        assert _line(data["lines"][1]) == ("60.00", "60.00", "0.00")

    def test_exempt_line_still_receives_discount(self, calculator, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["discounts"] = DISCOUNTS
        tax_base["lines"].append(second_line(chargeTaxes=False))

        data = calculator.calculate_to_dict(order_payload)

        assert _shipping(data) == ("9.77", "12.02", "23.00")
        assert _line(data["lines"][0]) == ("47.67", "58.64", "23.00")
        assert _line(data["lines"][1]) == ("58.64", "58.64", "0.00")

    def test_all_lines_exempt(self, calculator, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["lines"][0]["chargeTaxes"] = False
        tax_base["lines"].append(second_line(id="T3JkZXJMaW5lOjc=", chargeTaxes=False))

        data = calculator.calculate_to_dict(order_payload)

        for line in data["lines"]:
            assert _line(line) == ("60.00", "60.00", "0.00")

    def test_line_order_preserved(self, calculator, order_payload, second_line):
        tax_base = order_payload["taxBase"]
        tax_base["lines"] = [
            second_line(totalPrice={"amount": 5}),
            tax_base["lines"][0],
            second_line(totalPrice={"amount": 1}, chargeTaxes=False),
        ]

        data = calculator.calculate_to_dict(order_payload)

        assert [line["total_gross_amount"] for line in data["lines"]] == ["5.00", "60.00", "1.00"]

    def test_resolve_units_conserves_discount(self, calculator, order_payload, second_line):
        from order_tax.tax_calculation.payload import parse_tax_base

        tax_base = order_payload["taxBase"]
        tax_base["discounts"] = DISCOUNTS
        tax_base["lines"].append(second_line(totalPrice={"amount": 20}))
        context = parse_tax_base(order_payload)

        results = calculator.resolve_units(context)

        raw_total = sum(unit.raw_amount for unit in context.units)
        gross_total = sum(result.gross_amount for result in results)
        assert abs(raw_total - Decimal("3") - gross_total) < Decimal("1e-20")
        assert [r.identity for r in results] == ["shipping", "T3JkZXJMaW5lOjY=", "Q2hlY2tvdXRMaW5lOjc="]

    def test_separate_shipping_rate(self, order_payload):
        calculator = OrderTaxCalculator(FlatRateResolver(RATE, shipping_rate=Decimal("0")))
        data = calculator.calculate_to_dict(order_payload)
        assert _shipping(data) == ("12.30", "12.30", "0.00")
        assert _line(data["lines"][0]) == ("48.78", "60.00", "23.00")

    def test_zero_base_with_discount_fails(self, calculator, order_payload):
        tax_base = order_payload["taxBase"]
        tax_base["shippingPrice"] = {"amount": 0}
        tax_base["lines"][0]["totalPrice"] = {"amount": 0}
        tax_base["discounts"] = DISCOUNTS
        with pytest.raises(DivisionByZero):
            calculator.calculate_from_payload(order_payload)

    def test_negative_price_rejected(self, calculator, order_payload):
        order_payload["taxBase"]["lines"][0]["totalPrice"] = {"amount": -1}
        with pytest.raises(InvalidTaxInput):
            calculator.calculate_from_payload(order_payload)

    def test_unknown_rounding_stage_rejected(self):
        with pytest.raises(InvalidTaxInput):
            OrderTaxCalculator(rounding_stage="early")
