"""
Transport guard for the order/checkout calculate-taxes webhooks.

Requests are rejected here, before the engine runs. A request needs a
merchant domain and a calculate-taxes event, and its detached JWS must
verify against the keys registered for that domain.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import jwt

from ..utils.config import Config
from ..utils.logging import get_logger
from .calculator import OrderTaxCalculator
from .errors import (
    AuthenticationFailed,
    MissingEventType,
    MissingMerchantContext,
    TaxCalculationError,
    WebhookError,
)

logger = get_logger(__name__)

DOMAIN_HEADER = "saleor-domain"
EVENT_HEADER = "saleor-event"
SIGNATURE_HEADER = "saleor-signature"

CALCULATE_TAXES_EVENTS = frozenset({"order_calculate_taxes", "checkout_calculate_taxes"})
SIGNATURE_ALGORITHMS = ["RS256"]


@dataclass
class WebhookResponse:
    status_code: int
    data: Dict[str, Any] = field(default_factory=dict)


class SigningKeyStore:
    """JWKS documents registered per merchant domain."""

    def __init__(self, keys: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._jwks: Dict[str, Dict[str, Any]] = {}
        for domain, jwks in (keys or {}).items():
            self.register(domain, jwks)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SigningKeyStore":
        """Load a JSON file mapping domain -> JWKS document."""
        with open(path, "r", encoding="utf-8") as handle:
            return cls(json.load(handle))

    def register(self, domain: str, jwks: Mapping[str, Any]) -> None:
        self._jwks[domain] = dict(jwks)

    def __contains__(self, domain: str) -> bool:
        return domain in self._jwks

    def get_key(self, domain: str, kid: Optional[str]) -> jwt.PyJWK:
        """Return the signing key with ``kid`` (or the only key) for a domain."""
        jwks = self._jwks.get(domain)
        if jwks is None:
            raise AuthenticationFailed(f"No signing keys registered for {domain}")
        try:
            key_set = jwt.PyJWKSet.from_dict(jwks)
        except jwt.PyJWTError as exc:
            raise AuthenticationFailed(f"Unusable signing keys for {domain}: {exc}") from exc
        if kid is None:
            if len(key_set.keys) == 1:
                return key_set.keys[0]
            raise AuthenticationFailed("Signature has no key id")
        for key in key_set.keys:
            if key.key_id == kid:
                return key
        raise AuthenticationFailed(f"Unknown signing key id {kid!r} for {domain}")


def verify_signature(signature: Optional[str], body: bytes, domain: str, key_store: SigningKeyStore) -> None:
    """
    Verify a detached JWS (``b64: false``) over the raw request body.

    Raises:
        AuthenticationFailed: If the signature is missing or does not validate
    """
    if not signature:
        raise AuthenticationFailed("Missing request signature")
    try:
        header = jwt.get_unverified_header(signature)
    except jwt.PyJWTError as exc:
        raise AuthenticationFailed(f"Malformed request signature: {exc}") from exc

    # Attached tokens signed with the same keys must not vouch for this body
    crit = header.get("crit")
    if header.get("b64") is not False or not isinstance(crit, list) or "b64" not in crit:
        raise AuthenticationFailed("Request signature is not a detached unencoded-payload JWS")

    signing_key = key_store.get_key(domain, header.get("kid"))
    try:
        jwt.api_jws.decode_complete(
            signature,
            key=signing_key.key,
            algorithms=SIGNATURE_ALGORITHMS,
            detached_payload=body,
        )
    except jwt.PyJWTError as exc:
        raise AuthenticationFailed(f"Invalid request signature: {exc}") from exc


class WebhookHandler:
    """Validates a calculate-taxes request and runs the calculator on it."""

    def __init__(self, key_store: SigningKeyStore, calculator: Optional[OrderTaxCalculator] = None) -> None:
        self.key_store = key_store
        self.calculator = calculator or OrderTaxCalculator()

    @classmethod
    def from_config(cls, config: Config) -> "WebhookHandler":
        """Handler with keys from SIGNING_KEYS_FILE and a configured calculator."""
        keys_file = config.get("signing_keys_file")
        key_store = SigningKeyStore.from_file(keys_file) if keys_file else SigningKeyStore()
        return cls(key_store, OrderTaxCalculator.from_config(config))

    def validate(self, headers: Mapping[str, str], body: bytes) -> str:
        """Run the transport checks and return the event name."""
        normalized = {key.lower(): value for key, value in headers.items()}

        domain = normalized.get(DOMAIN_HEADER)
        if not domain:
            raise MissingMerchantContext("Missing merchant domain header")

        event = normalized.get(EVENT_HEADER)
        if not event or event.lower() not in CALCULATE_TAXES_EVENTS:
            raise MissingEventType(f"Missing or unsupported event: {event!r}")

        verify_signature(normalized.get(SIGNATURE_HEADER), body, domain, self.key_store)
        return event.lower()

    def handle(self, headers: Mapping[str, str], body: bytes) -> WebhookResponse:
        try:
            event = self.validate(headers, body)
        except WebhookError as exc:
            logger.warning(f"Rejected webhook: {exc}")
            return WebhookResponse(exc.status_code, {"error": str(exc)})

        try:
            payload = json.loads(body)
        except ValueError:
            logger.warning("Rejected webhook: body is not valid JSON")
            return WebhookResponse(400, {"error": "Request body is not valid JSON"})

        try:
            response = self.calculator.calculate_from_payload(payload)
        except TaxCalculationError as exc:
            logger.warning(f"Cannot calculate taxes for {event}: {exc}")
            return WebhookResponse(400, {"error": str(exc)})
        except Exception:
            logger.exception(f"Unexpected error while handling {event}")
            return WebhookResponse(500, {"error": "Internal error"})

        return WebhookResponse(200, response.to_dict())
