"""
Braintree Gateway Client

Card-gateway operations over the official Braintree SDK. Each client owns its
own braintree.Configuration, so differently-credentialed clients can share a
process without touching the SDK's global configuration.

Money enters in integer minor units (cents) and is sent to the SDK as a
decimal string.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

import braintree

from braintree_gateway.core.logging import get_logger

from .base import PaymentSource, Response

logger = get_logger(__name__)

ENVIRONMENTS = {
    "production": braintree.Environment.Production,
    "sandbox": braintree.Environment.Sandbox,
}

# storefront address key -> Braintree address key
ADDRESS_FIELDS = (
    ("address1", "street_address"),
    ("address2", "extended_address"),
    ("company", "company"),
    ("city", "locality"),
    ("state", "region"),
    ("zip", "postal_code"),
    ("country", "country_code_alpha2"),
    ("country_name", "country_name"),
)


def to_gateway_amount(money: Union[int, Decimal, str]) -> str:
    """Convert minor units to the SDK's two-place decimal string."""
    return str((Decimal(str(money)) / 100).quantize(Decimal("0.01")))


def address_parameters(address: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        braintree_key: address[key]
        for key, braintree_key in ADDRESS_FIELDS
        if address.get(key) is not None
    }


def credit_card_details(credit_card: Any) -> Dict[str, Any]:
    return {
        "token": credit_card.token,
        "last_4": credit_card.last_4,
        "card_type": credit_card.card_type,
        "bin": getattr(credit_card, "bin", None),
        "expiration_date": getattr(credit_card, "expiration_date", None),
        "masked_number": getattr(credit_card, "masked_number", None),
    }


class BraintreeProvider:
    """Braintree client used by the storefront adapter."""

    def __init__(
        self,
        merchant_id: str,
        public_key: str,
        private_key: str,
        environment: str = "sandbox",
        merchant_account_id: Optional[str] = None,
        **config
    ):
        """
        Build a client with its own SDK configuration.

        Args:
            merchant_id: Braintree merchant id
            public_key: API public key
            private_key: API private key
            environment: 'production' or 'sandbox'
            merchant_account_id: Merchant account to settle into, if not the default
            **config: Remaining gateway preferences, unused by the SDK
        """
        self.merchant_id = merchant_id
        self.environment = environment
        self.merchant_account_id = merchant_account_id
        self.config = config
        self.gateway = braintree.BraintreeGateway(
            braintree.Configuration(
                environment=ENVIRONMENTS.get(environment, braintree.Environment.Sandbox),
                merchant_id=merchant_id,
                public_key=public_key,
                private_key=private_key,
            )
        )

    def authorize(
        self,
        money: Union[int, Decimal],
        payment_method: Union[str, PaymentSource],
        options: Optional[Dict[str, Any]] = None
    ) -> Response:
        """
        Create a sale transaction.

        Args:
            money: Amount in cents
            payment_method: Vault customer id, or a card to charge directly
            options: order_id, email, billing_address, shipping_address,
                submit_for_settlement, merchant_account_id

        Returns:
            Response keyed by the new transaction id
        """
        parameters = self._transaction_parameters(money, payment_method, options or {})
        result = self.gateway.transaction.sale(parameters)
        return self._transaction_response("authorize", result)

    def purchase(
        self,
        money: Union[int, Decimal],
        payment_method: Union[str, PaymentSource],
        options: Optional[Dict[str, Any]] = None
    ) -> Response:
        return self.authorize(money, payment_method, {**(options or {}), "submit_for_settlement": True})

    def capture(self, money: Union[int, Decimal], authorization: str) -> Response:
        result = self.gateway.transaction.submit_for_settlement(authorization, to_gateway_amount(money))
        return self._transaction_response("capture", result)

    def void(self, authorization: str) -> Response:
        result = self.gateway.transaction.void(authorization)
        return self._transaction_response("void", result)

    def refund(self, authorization: str, money: Optional[Union[int, Decimal]] = None) -> Response:
        """Refund a settled transaction; without money the whole amount is returned."""
        if money is None:
            result = self.gateway.transaction.refund(authorization)
        else:
            result = self.gateway.transaction.refund(authorization, to_gateway_amount(money))
        return self._transaction_response("refund", result)

    def credit(
        self,
        money: Union[int, Decimal],
        payment_method: Union[str, PaymentSource],
        options: Optional[Dict[str, Any]] = None
    ) -> Response:
        parameters = self._transaction_parameters(money, payment_method, options or {})
        result = self.gateway.transaction.credit(parameters)
        return self._transaction_response("credit", result)

    def find_transaction(self, transaction_id: str):
        """Fetch the gateway's transaction record; raises braintree.exceptions.NotFoundError."""
        return self.gateway.transaction.find(transaction_id)

    def store(self, card: PaymentSource, options: Optional[Dict[str, Any]] = None) -> Response:
        """
        Vault a card.

        A new vault customer is created unless options["customer"] names an
        existing one, in which case the card is added to it.

        Returns:
            Response whose params carry customer_vault_id and braintree_customer
        """
        options = options or {}
        card_parameters = self._credit_card_parameters(card)
        if options.get("billing_address"):
            card_parameters["billing_address"] = address_parameters(options["billing_address"])
        if options.get("verify_card"):
            card_parameters["options"] = {"verify_card": True}
            if self.merchant_account_id:
                card_parameters["options"]["verification_merchant_account_id"] = self.merchant_account_id

        customer_id = options.get("customer")
        if customer_id:
            result = self.gateway.credit_card.create({"customer_id": customer_id, **card_parameters})
            if not result.is_success:
                return self._failure("store", result)
            customer = {
                "id": customer_id,
                "email": options.get("email"),
                "credit_cards": [credit_card_details(result.credit_card)],
            }
        else:
            parameters: Dict[str, Any] = {"credit_card": card_parameters}
            if options.get("email"):
                parameters["email"] = options["email"]
            result = self.gateway.customer.create(parameters)
            if not result.is_success:
                return self._failure("store", result)
            customer = {
                "id": result.customer.id,
                "email": result.customer.email,
                "credit_cards": [credit_card_details(c) for c in result.customer.credit_cards],
            }

        return Response(
            success=True,
            message="OK",
            params={"customer_vault_id": customer["id"], "braintree_customer": customer},
            authorization=customer["id"],
        )

    def _transaction_parameters(
        self,
        money: Union[int, Decimal],
        payment_method: Union[str, PaymentSource],
        options: Dict[str, Any]
    ) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {"amount": to_gateway_amount(money)}

        if isinstance(payment_method, str):
            parameters["customer_id"] = payment_method
        else:
            parameters["credit_card"] = self._credit_card_parameters(payment_method)
            if options.get("email"):
                parameters["customer"] = {"email": options["email"]}

        if options.get("order_id"):
            parameters["order_id"] = str(options["order_id"])
        merchant_account_id = options.get("merchant_account_id") or self.merchant_account_id
        if merchant_account_id:
            parameters["merchant_account_id"] = merchant_account_id
        if options.get("billing_address"):
            parameters["billing"] = address_parameters(options["billing_address"])
        if options.get("shipping_address"):
            parameters["shipping"] = address_parameters(options["shipping_address"])
        if options.get("submit_for_settlement"):
            parameters["options"] = {"submit_for_settlement": True}
        return parameters

    def _credit_card_parameters(self, card: PaymentSource) -> Dict[str, Any]:
        month = getattr(card, "month", None)
        year = getattr(card, "year", None)
        parameters = {
            "number": getattr(card, "number", None),
            "expiration_month": str(month).zfill(2) if month is not None else None,
            "expiration_year": str(year) if year is not None else None,
            "cvv": getattr(card, "verification_value", None),
            "cardholder_name": getattr(card, "name", None),
        }
        return {key: value for key, value in parameters.items() if value is not None}

    def _transaction_response(self, operation: str, result: Any) -> Response:
        if not result.is_success:
            return self._failure(operation, result)

        transaction = result.transaction
        return Response(
            success=True,
            message="OK",
            params={
                "braintree_transaction": {
                    "id": transaction.id,
                    "status": transaction.status,
                    "amount": transaction.amount,
                }
            },
            authorization=transaction.id,
        )

    def _failure(self, operation: str, result: Any) -> Response:
        transaction = getattr(result, "transaction", None)
        deep_errors = result.errors.deep_errors if result.errors else []
        if deep_errors:
            error_code = str(deep_errors[0].code)
        elif transaction is not None:
            error_code = getattr(transaction, "processor_response_code", None)
        else:
            error_code = None

        logger.warning(
            "braintree.gateway.declined",
            operation=operation,
            message=result.message,
            error_code=error_code,
        )
        return Response(
            success=False,
            message=result.message,
            params={"braintree_transaction": {"id": transaction.id, "status": transaction.status}} if transaction is not None else {},
            authorization=transaction.id if transaction is not None else None,
            error_code=error_code,
        )
