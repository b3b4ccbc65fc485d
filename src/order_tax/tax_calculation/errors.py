"""Exceptions raised by the tax engine and the webhook guard."""

from __future__ import annotations


class TaxCalculationError(Exception):
    """Base class for failures raised while computing an order's taxes."""


class InvalidTaxInput(TaxCalculationError):
    """A price, discount or rate failed validation at the engine boundary."""


class InvalidPayload(TaxCalculationError):
    """The webhook body does not have the expected tax-base structure."""


class DivisionByZero(TaxCalculationError):
    """A non-zero discount cannot be prorated against a zero raw total."""

    def __init__(self, total_discount) -> None:
        self.total_discount = total_discount
        super().__init__(
            f"Cannot prorate discount of {total_discount} across units with a zero raw total"
        )


class WebhookError(Exception):
    """Base class for requests rejected before the engine is invoked."""

    status_code = 400


class MissingMerchantContext(WebhookError):
    """The request carries no merchant domain."""


class MissingEventType(WebhookError):
    """The request carries no recognized event type."""


class AuthenticationFailed(WebhookError):
    """The request signature is missing or does not validate."""
