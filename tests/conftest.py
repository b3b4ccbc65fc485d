"""
Pytest configuration and shared fixtures for the Order Tax tests.
"""

import copy
import json
import sys
from decimal import Decimal
from pathlib import Path

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

# Add src to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from order_tax.tax_calculation.calculator import OrderTaxCalculator  # noqa: E402
from order_tax.tax_calculation.rates import FlatRateResolver  # noqa: E402

RATE = Decimal("0.23")

TAX_BASE = {
    "pricesEnteredWithTax": True,
    "currency": "PLN",
    "shippingPrice": {"amount": 12.3},
    "address": {"country": {"code": "PL"}, "postalCode": "53-601", "city": "WROCŁAW"},
    "discounts": [],
    "channel": {"slug": "default-channel"},
    "sourceObject": {"__typename": "Order", "id": "T3JkZXI6ZTQ0MjRkYmYtNmJiYi00MjE1"},
    "lines": [
        {
            "id": "T3JkZXJMaW5lOjY=",
            "chargeTaxes": True,
            "quantity": 3,
            "unitPrice": {"amount": 20},
            "totalPrice": {"amount": 60},
            "sourceLine": {
                "__typename": "OrderLine",
                "id": "T3JkZXJMaW5lOjY=",
                "variant": {"id": "UHJvZHVjdFZhcmlhbnQ6MzQ4", "product": {"name": "Monospace Tee"}},
            },
        }
    ],
}


@pytest.fixture
def tax_base():
    """A fresh copy of the single-line CalculateTaxes tax base."""
    return copy.deepcopy(TAX_BASE)


@pytest.fixture
def order_payload(tax_base):
    """Full webhook body wrapping the tax base."""
    return {"__typename": "CalculateTaxes", "taxBase": tax_base}


@pytest.fixture
def second_line(tax_base):
    """Build a copy of the first line under a different source line id."""
    def _build(**overrides):
        line = copy.deepcopy(tax_base["lines"][0])
        line["sourceLine"]["id"] = "Q2hlY2tvdXRMaW5lOjc="
        line.update(overrides)
        return line
    return _build


@pytest.fixture
def calculator():
    return OrderTaxCalculator(rate_resolver=FlatRateResolver(rate=RATE))


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(rsa_private_key):
    """JWKS document holding the public half of the test key."""
    public_jwk = json.loads(jwt.algorithms.RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
    public_jwk.update({"kid": "test-key", "use": "sig", "alg": "RS256"})
    return {"keys": [public_jwk]}


@pytest.fixture
def sign(rsa_private_key):
    """Produce a detached RS256 JWS over a raw body."""
    def _sign(body: bytes, kid: str = "test-key") -> str:
        return jwt.api_jws.encode(
            body,
            rsa_private_key,
            algorithm="RS256",
            headers={"kid": kid, "crit": ["b64"]},
            is_payload_detached=True,
        )
    return _sign
