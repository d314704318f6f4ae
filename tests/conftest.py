"""
Shared test configuration and fixtures for the Braintree gateway suite.

Host records (cards, addresses, payments) are plain dataclasses standing in
for the storefront's models; the gateway client is always mocked.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional
from unittest.mock import Mock

import pytest

from braintree_gateway.core.config import GatewaySettings, clear_settings_cache
from braintree_gateway.gateway.braintree_adapter import BraintreeAdapter
from braintree_gateway.gateway.provider import BraintreeProvider


@dataclass
class Country:
    iso: Optional[str] = "US"
    name: Optional[str] = "United States"


@dataclass
class Address:
    address1: Optional[str] = "123 Main St"
    address2: Optional[str] = "Suite 4"
    company: Optional[str] = "Acme"
    city: Optional[str] = "San Francisco"
    state_text: Optional[str] = "CA"
    zipcode: Optional[str] = "94105"
    country: Optional[Country] = field(default_factory=Country)


@dataclass
class CreditCard:
    number: Optional[str] = "4111111111111111"
    month: Optional[int] = 12
    year: Optional[int] = 2030
    verification_value: Optional[str] = "123"
    name: Optional[str] = "John Doe"
    last_digits: Optional[str] = None
    cc_type: Optional[str] = None
    gateway_customer_profile_id: Optional[str] = None
    gateway_payment_profile_id: Optional[str] = None
    bill_address: Optional[Address] = None
    saves: int = 0

    def save(self) -> None:
        self.saves += 1


@dataclass
class User:
    email: Optional[str] = "customer@example.com"


@dataclass
class Order:
    user: Optional[User] = field(default_factory=User)


@dataclass
class Payment:
    source: CreditCard
    order: Optional[Order] = field(default_factory=Order)
    errors: List[Any] = field(default_factory=list)

    def gateway_error(self, response) -> None:
        self.errors.append(response)


@dataclass
class Authorization:
    amount: Any
    response_code: str


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    for name in (
        "ENVIRONMENT",
        "MERCHANT_ID",
        "MERCHANT_ACCOUNT_ID",
        "PUBLIC_KEY",
        "PRIVATE_KEY",
        "CLIENT_SIDE_ENCRYPTION_KEY",
    ):
        monkeypatch.delenv(f"BRAINTREE_{name}", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def gateway_settings():
    return GatewaySettings(
        environment="sandbox",
        merchant_id="merchant_123",
        merchant_account_id="acct_1",
        public_key="public_123",
        private_key="private_123",
        client_side_encryption_key="MIIBCgKCAQEA",
    )


@pytest.fixture
def provider():
    return Mock(spec=BraintreeProvider)


@pytest.fixture
def provider_class(provider):
    return Mock(return_value=provider)


@pytest.fixture
def adapter(gateway_settings, provider_class):
    return BraintreeAdapter(settings=gateway_settings, provider_class=provider_class)


@pytest.fixture
def credit_card():
    return CreditCard(bill_address=Address())


@pytest.fixture
def payment(credit_card):
    return Payment(source=credit_card)


@pytest.fixture
def remote_transaction():
    transaction = Mock()
    transaction.id = "txn_123"
    transaction.amount = Decimal("50.00")
    transaction.status = "settled"
    return transaction
