"""
Payment Gateway Base Classes and Interfaces

Defines the contract the storefront expects from a card gateway, the records
it hands to the gateway, and the errors raised locally.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

from braintree_gateway.core.config import GatewaySettings, get_settings, normalize_environment

GATEWAY_PREFERENCES = (
    "merchant_id",
    "merchant_account_id",
    "public_key",
    "private_key",
    "client_side_encryption_key",
    "environment",
)


@dataclass
class Response:
    """Normalized result of a gateway call."""
    success: bool
    message: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    authorization: Optional[str] = None
    error_code: Optional[str] = None


class PaymentError(Exception):
    """Errors raised by the adapter itself (never by a gateway decline)."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        provider: Optional[str] = "braintree",
        gateway_response: Optional[Dict[str, Any]] = None,
        transaction_id: Optional[str] = None
    ):
        super().__init__(message)
        self.error_message = message
        self.error_code = error_code
        self.provider = provider
        self.gateway_response = gateway_response
        self.transaction_id = transaction_id


class InvalidArgumentError(PaymentError, TypeError):
    """An entry point was called with an unsupported argument shape."""


class UnsupportedOperationError(PaymentError, NotImplementedError):
    """The gateway cannot perform the requested operation."""


class Country(Protocol):
    iso: Optional[str]
    name: Optional[str]


class Address(Protocol):
    address1: Optional[str]
    address2: Optional[str]
    company: Optional[str]
    city: Optional[str]
    state_text: Optional[str]
    zipcode: Optional[str]
    country: Optional[Country]


class PaymentSource(Protocol):
    """A stored credit card owned by the host application."""
    number: Optional[str]
    month: Optional[int]
    year: Optional[int]
    verification_value: Optional[str]
    name: Optional[str]
    last_digits: Optional[str]
    cc_type: Optional[str]
    gateway_customer_profile_id: Optional[str]
    gateway_payment_profile_id: Optional[str]
    bill_address: Optional[Address]

    def save(self) -> None:
        ...


class Authorization(Protocol):
    amount: Decimal
    response_code: str


class User(Protocol):
    email: Optional[str]


class Order(Protocol):
    user: Optional[User]


class Payment(Protocol):
    source: PaymentSource
    order: Optional[Order]

    def gateway_error(self, response: Response) -> None:
        """Report a failed gateway response through the host's error channel."""
        ...


class PaymentGateway(ABC):
    """Abstract base class for storefront card gateways."""

    def __init__(self, settings: Optional[GatewaySettings] = None, provider_class: Optional[type] = None):
        """
        Initialize the gateway.

        Args:
            settings: Gateway credentials; defaults to the cached environment settings
            provider_class: Client class to build on first use; defaults to the gateway's own
        """
        self.settings = settings or get_settings()
        self.provider_class = provider_class or self._get_provider_class()
        self._provider = None

    @abstractmethod
    def _get_provider_class(self) -> type:
        """Return the client class this gateway delegates to."""
        pass

    @property
    def provider(self):
        """The configured client, built from options() on first use."""
        if self._provider is None:
            self._provider = self.provider_class(**self.options())
        return self._provider

    def preferences(self) -> Dict[str, Any]:
        preferences = self.settings.model_dump(include=set(GATEWAY_PREFERENCES))
        preferences["environment"] = normalize_environment(preferences.get("environment"))
        return preferences

    def options(self) -> Dict[str, Any]:
        return dict(self.preferences())

    def method_type(self) -> str:
        return "gateway"

    def payment_profiles_supported(self) -> bool:
        return False

    def create_profile(self, payment: Payment) -> None:
        """Store the payment's source with the gateway; no-op unless profiles are supported."""
        return None

    @abstractmethod
    def authorize(self, amount: int, source: PaymentSource, options: Optional[Dict[str, Any]] = None) -> Response:
        """
        Authorize an amount against a card or stored profile.

        Args:
            amount: Amount in minor units (cents)
            source: Card being charged
            options: Order details (order_id, email, addresses)

        Returns:
            Response from the gateway; declines have success=False
        """
        pass

    @abstractmethod
    def purchase(self, amount: int, source: PaymentSource, options: Optional[Dict[str, Any]] = None) -> Response:
        """Authorize and submit for settlement in one step."""
        pass

    @abstractmethod
    def capture(self, authorization: Authorization, source: Any = None, options: Any = None) -> Response:
        """Settle a previous authorization for its full amount."""
        pass

    @abstractmethod
    def credit(self, *args: Any) -> Response:
        """Return money for a previous transaction."""
        pass

    @abstractmethod
    def void(self, response_code: str, *ignored: Any) -> Response:
        """Void an unsettled transaction."""
        pass

    @abstractmethod
    def cancel(self, response_code: str) -> Response:
        """Void or refund a transaction depending on its settlement state."""
        pass
