"""
Payment gateway integration

Braintree adapter for the storefront's card payments, the client it
delegates to, and the shared contract and errors.
"""

from .base import (
    PaymentGateway,
    Response,
    PaymentError,
    InvalidArgumentError,
    UnsupportedOperationError,
)
from .braintree_adapter import BraintreeAdapter, CARD_TYPE_MAPPING
from .provider import BraintreeProvider

__all__ = [
    "PaymentGateway",
    "Response",
    "PaymentError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "BraintreeAdapter",
    "BraintreeProvider",
    "CARD_TYPE_MAPPING",
]
