"""Tax calculation module entry point."""

from .allocation import allocate
from .assembler import assemble
from .calculator import OrderTaxCalculator
from .errors import (
    AuthenticationFailed,
    DivisionByZero,
    InvalidPayload,
    InvalidTaxInput,
    MissingEventType,
    MissingMerchantContext,
    TaxCalculationError,
    WebhookError,
)
from .models import Discount, OrderTaxContext, OrderTaxResponse, TaxableUnit, UnitResult
from .payload import parse_tax_base
from .rates import FlatRateResolver, RateResolver
from .resolver import resolve
from .webhook import SigningKeyStore, WebhookHandler, WebhookResponse

__all__ = [
    "allocate",
    "assemble",
    "resolve",
    "parse_tax_base",
    "OrderTaxCalculator",
    "FlatRateResolver",
    "RateResolver",
    "SigningKeyStore",
    "WebhookHandler",
    "WebhookResponse",
    "Discount",
    "OrderTaxContext",
    "OrderTaxResponse",
    "TaxableUnit",
    "UnitResult",
    "TaxCalculationError",
    "InvalidTaxInput",
    "InvalidPayload",
    "DivisionByZero",
    "WebhookError",
    "MissingMerchantContext",
    "MissingEventType",
    "AuthenticationFailed",
]
