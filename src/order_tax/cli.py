"""
Command-line interface for the Order Tax calculator.
"""

import argparse
import json
import sys
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .utils.config import Config
from .utils.logging import configure_logging, get_logger
from .tax_calculation.allocation import OVERFLOW_ALLOW, OVERFLOW_CLAMP, total_discount
from .tax_calculation.calculator import ROUND_DISCOUNTED, ROUND_FINAL, OrderTaxCalculator
from .tax_calculation.models import OrderTaxContext, OrderTaxResponse
from .tax_calculation.payload import parse_tax_base
from .tax_calculation.rates import FlatRateResolver

logger = get_logger("cli")


def _rate_argument(value: str) -> Decimal:
    """argparse type for fractional tax rates such as 0.23."""
    try:
        rate = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid rate: {value!r}")
    if not rate.is_finite() or rate < 0:
        raise argparse.ArgumentTypeError(f"rate must be a non-negative number: {value!r}")
    return rate


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="order-tax",
        description="Order Tax - discount proration and net/gross tax calculation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  order-tax --version
  order-tax calculate --payload order.json --rate 0.23
  order-tax calculate --payload - --rate 0.23 --json < order.json
        """,
    )
    
    parser.add_argument(
        "--version",
        action="version",
        version=f"Order Tax {__version__}",
    )
    
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    
    parser.add_argument(
        "--log-file",
        help="Log file path",
    )
    
    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
    )
    
    calculate_parser = subparsers.add_parser(
        "calculate",
        help="Calculate shipping and line taxes for a CalculateTaxes payload",
    )
    calculate_parser.add_argument(
        "--payload",
        type=str,
        required=True,
        help="Path to a CalculateTaxes JSON body, or '-' for stdin",
    )
    calculate_parser.add_argument(
        "--rate",
        type=_rate_argument,
        help="Tax rate for lines as a fraction, e.g. 0.23 (default: DEFAULT_TAX_RATE)",
    )
    calculate_parser.add_argument(
        "--shipping-rate",
        type=_rate_argument,
        help="Tax rate for shipping as a fraction (default: same as lines)",
    )
    calculate_parser.add_argument(
        "--clamp-discounts",
        action="store_true",
        help="Floor discounted amounts at zero instead of letting them go negative",
    )
    calculate_parser.add_argument(
        "--round-discounted",
        action="store_true",
        help="Round each discounted amount to cents before deriving net/gross",
    )
    calculate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the webhook response body as JSON",
    )
    
    return parser


def load_payload(path: str) -> Dict[str, Any]:
    """Read a JSON payload from a file path, or stdin for '-'."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def build_calculator(
    config: Config,
    rate: Optional[Decimal] = None,
    shipping_rate: Optional[Decimal] = None,
    clamp_discounts: bool = False,
    round_discounted: bool = False,
) -> OrderTaxCalculator:
    """Calculator from configuration, with command-line overrides applied."""
    line_rate = rate if rate is not None else config.get("default_tax_rate")
    if shipping_rate is None:
        shipping_rate = config.get("shipping_tax_rate")
        # An explicit --rate also applies to shipping unless shipping has its own
        if shipping_rate is None and rate is not None:
            shipping_rate = rate
    overflow = OVERFLOW_CLAMP if clamp_discounts else config.get("discount_overflow", OVERFLOW_ALLOW)
    rounding_stage = ROUND_DISCOUNTED if round_discounted else config.get("rounding_stage", ROUND_FINAL)
    return OrderTaxCalculator(
        rate_resolver=FlatRateResolver(rate=line_rate, shipping_rate=shipping_rate),
        discount_overflow=overflow,
        rounding_stage=rounding_stage,
    )


def print_boxed(header_lines: List[Tuple[str, Any]]) -> None:
    label_width = max(len(lbl) for lbl, _ in header_lines)
    inner_width = max(len(f" {lbl.ljust(label_width)} : {val}") for lbl, val in header_lines) + 1
    top = "┌" + "─" * (inner_width) + "┐"
    bottom = "└" + "─" * (inner_width) + "┘"
    print(top)
    for lbl, val in header_lines:
        line = f" {lbl.ljust(label_width)} : {val}"
        padding = inner_width - len(line)
        print(f"│{line + ' '*padding}│")
    print(bottom)


def print_breakdown(context: OrderTaxContext, response: OrderTaxResponse) -> None:
    """Print the shipping and per-line results as a table."""
    rows = [(
        "Shipping",
        str(context.shipping.raw_amount),
        response.shipping_price_net_amount,
        response.shipping_price_gross_amount,
        response.shipping_tax_rate,
    )]
    for index, (unit, line) in enumerate(zip(context.lines, response.lines), start=1):
        label = f"Line {index}" + (" (exempt)" if unit.tax_exempt else "")
        rows.append((label, str(unit.raw_amount), line.total_net_amount, line.total_gross_amount, line.tax_rate))

    headers = ("Unit", "Raw", "Net", "Gross", "Rate %")
    widths = [max(len(str(row[i])) for row in rows + [headers]) for i in range(len(headers))]
    print("\n" + "  ".join(h.ljust(w) if i == 0 else h.rjust(w) for i, (h, w) in enumerate(zip(headers, widths))))
    print("-" * (sum(widths) + 2 * (len(widths) - 1)))
    for row in rows:
        print("  ".join(c.ljust(w) if i == 0 else c.rjust(w) for i, (c, w) in enumerate(zip(row, widths))))


def calculate_order_tax(
    payload_path: str,
    rate: Optional[Decimal] = None,
    shipping_rate: Optional[Decimal] = None,
    clamp_discounts: bool = False,
    round_discounted: bool = False,
    as_json: bool = False,
) -> OrderTaxResponse:
    """
    Calculate and print the tax breakdown of one order.
    
    Args:
        payload_path: JSON file with the CalculateTaxes body ('-' for stdin)
        rate: Line tax rate override as a fraction
        shipping_rate: Shipping tax rate override as a fraction
        clamp_discounts: Floor discounted amounts at zero
        round_discounted: Round discounted amounts to cents before net/gross
        as_json: Print the raw response body instead of the table
    """
    config = Config(".env")
    
    source_name = "stdin" if payload_path == "-" else payload_path
    logger.info(f"Loading payload from {source_name}")
    body = load_payload(payload_path)
    
    calculator = build_calculator(
        config,
        rate=rate,
        shipping_rate=shipping_rate,
        clamp_discounts=clamp_discounts,
        round_discounted=round_discounted,
    )
    context = parse_tax_base(body)
    response = calculator.calculate(context)
    
    if as_json:
        print(json.dumps(response.to_dict(), indent=2))
        return response
    
    print_boxed([
        ("Payload", source_name),
        ("Prices entered with tax", "yes" if context.prices_entered_with_tax else "no"),
        ("Lines", len(context.lines)),
        ("Total discount", str(total_discount(context.discounts))),
        ("Discount overflow", calculator.discount_overflow),
        ("Rounding stage", calculator.rounding_stage),
        ("Rates", repr(calculator.rate_resolver)),
    ])
    print_breakdown(context, response)
    return response


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.
    
    Args:
        args: Command line arguments (defaults to sys.argv[1:])
        
    Returns:
        Exit code
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    
    logger = configure_logging(Config(".env"), verbose=parsed_args.verbose, log_file=parsed_args.log_file)
    
    try:
        if parsed_args.command == "calculate":
            calculate_order_tax(
                payload_path=parsed_args.payload,
                rate=parsed_args.rate,
                shipping_rate=parsed_args.shipping_rate,
                clamp_discounts=parsed_args.clamp_discounts,
                round_discounted=parsed_args.round_discounted,
                as_json=parsed_args.json,
            )
            
        elif not parsed_args.command:
            parser.print_help()
            return 1
            
    except Exception as e:
        logger.error(f"Error: {e}")
        return 1
    
    return 0


if __name__ == "__main__":
    sys.exit(main())
