"""
Braintree Payment Gateway Adapter

Maps the storefront's payment operations onto Braintree and records the
vault tokens Braintree issues on the stored card.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

import braintree

from braintree_gateway.core.logging import get_logger

from .base import (
    Authorization,
    InvalidArgumentError,
    Payment,
    PaymentGateway,
    PaymentSource,
    Response,
    UnsupportedOperationError,
)
from .provider import BraintreeProvider

logger = get_logger(__name__)

CARD_TYPE_MAPPING = {
    "American Express": "american_express",
    "Diners Club": "diners_club",
    "Discover": "discover",
    "JCB": "jcb",
    "Laser": "laser",
    "Maestro": "maestro",
    "MasterCard": "master",
    "Solo": "solo",
    "Switch": "switch",
    "Visa": "visa",
}


def fill_missing(parameters: Dict[str, Any], key: str, value: Any) -> None:
    if parameters.get(key) is None:
        parameters[key] = value


class BraintreeAdapter(PaymentGateway):
    """Braintree payment gateway adapter."""

    def _get_provider_class(self) -> type:
        return BraintreeProvider

    @property
    def client_side_encryption_key(self) -> Optional[str]:
        return self.settings.client_side_encryption_key

    def payment_profiles_supported(self) -> bool:
        return True

    def options(self) -> Dict[str, Any]:
        options = super().options()
        # The client treats a present-but-blank merchant account as a real one.
        merchant_account_id = options.get("merchant_account_id")
        if merchant_account_id is None or not str(merchant_account_id).strip():
            options.pop("merchant_account_id", None)
        return options

    def authorize(self, amount: int, source: PaymentSource, options: Optional[Dict[str, Any]] = None) -> Response:
        options = dict(options or {})
        self.adjust_options_for_braintree(source, options)
        profile_id = source.gateway_customer_profile_id
        payment_method = profile_id if profile_id is not None else source
        return self.provider.authorize(amount, payment_method, options)

    def purchase(self, amount: int, source: PaymentSource, options: Optional[Dict[str, Any]] = None) -> Response:
        return self.authorize(amount, source, {**(options or {}), "submit_for_settlement": True})

    def capture(self, authorization: Authorization, ignored_source: Any = None, ignored_options: Any = None) -> Response:
        amount = int(Decimal(str(authorization.amount)) * 100)
        return self.provider.capture(amount, authorization.response_code)

    def void(self, response_code: str, *ignored_options: Any) -> Response:
        return self.provider.void(response_code)

    def cancel(self, response_code: str) -> Response:
        transaction = self.provider.find_transaction(response_code)
        # Only settled or settling transactions can be refunded; anything
        # still waiting to settle has to be voided.
        if transaction.status == braintree.Transaction.Status.SubmittedForSettlement:
            logger.info("braintree.cancel.void", transaction_id=response_code)
            return self.provider.void(response_code)
        logger.info("braintree.cancel.refund", transaction_id=response_code, status=transaction.status)
        return self.provider.refund(response_code)

    def credit(self, *args: Any) -> Response:
        """
        Refund a previous transaction.

        Accepts (amount, payment, response_code, options) or
        (amount, response_code, options); the payment is ignored so credits
        are always issued as refunds against the original transaction.
        """
        if len(args) == 4:
            amount, _payment, response_code, options = args
            return self.credit_without_payment_profiles(amount, response_code, options)
        if len(args) == 3:
            return self.credit_without_payment_profiles(*args)
        raise InvalidArgumentError(
            f"Expected 3 or 4 arguments, received {len(args)}",
            error_code="invalid_argument_count",
        )

    def credit_with_payment_profiles(
        self,
        amount: int,
        payment: Payment,
        response_code: str,
        options: Optional[Dict[str, Any]] = None
    ) -> Response:
        """Issue an unlinked credit to the payment's card."""
        # Braintree disables unlinked credits on new merchant accounts.
        logger.warning("braintree.credit.disabled", transaction_id=response_code)
        return self.provider.credit(amount, payment.source)

    def credit_without_payment_profiles(
        self,
        amount: Any,
        response_code: str,
        options: Optional[Dict[str, Any]] = None
    ) -> Response:
        """
        Refund all or part of a transaction.

        Args:
            amount: Amount to return, in cents
            response_code: Id of the transaction being refunded
            options: Unused

        Returns:
            Response from the refund call

        Raises:
            UnsupportedOperationError: If amount exceeds the original transaction
        """
        transaction = self.provider.find_transaction(response_code)
        requested = Decimal(str(amount))
        original = transaction.amount * 100

        if requested == original:
            logger.info("braintree.credit.full_refund", transaction_id=response_code)
            return self.provider.refund(response_code)
        if requested < original:
            logger.info("braintree.credit.partial_refund", transaction_id=response_code, amount=str(requested))
            return self.provider.refund(response_code, amount)
        raise UnsupportedOperationError(
            f"Refund of {requested} exceeds the original amount of {original}",
            error_code="refund_exceeds_original",
            transaction_id=response_code,
        )

    def create_profile(self, payment: Payment) -> None:
        source = payment.source
        if source.gateway_customer_profile_id is not None:
            return

        response = self.provider.store(source, self.create_profile_options(payment))
        if not response.success:
            logger.warning("braintree.profile.failed", message=response.message, error_code=response.error_code)
            payment.gateway_error(response)
            return

        source.gateway_customer_profile_id = response.params["customer_vault_id"]
        source.save()
        logger.info("braintree.profile.created", customer_id=source.gateway_customer_profile_id)

        credit_cards = response.params.get("braintree_customer", {}).get("credit_cards", [])
        if credit_cards:
            self.update_card_number(source, credit_cards[0])

    def update_card_number(self, source: PaymentSource, card: Dict[str, Any]) -> None:
        last_4 = card.get("last_4")
        if last_4:
            source.last_digits = last_4
        source.gateway_payment_profile_id = card.get("token")
        card_type = card.get("card_type")
        # Unknown brands clear cc_type rather than storing the raw string.
        if card_type:
            source.cc_type = CARD_TYPE_MAPPING.get(card_type)
        source.save()

    def create_profile_options(self, payment: Payment, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build the vaulting parameters for a payment; caller-supplied values win."""
        parameters = options if options is not None else {}
        source = payment.source

        if source.gateway_customer_profile_id is not None:
            fill_missing(parameters, "customer", source.gateway_customer_profile_id)
        order = payment.order
        if order is not None and order.user is not None:
            fill_missing(parameters, "email", order.user.email)

        bill_address = source.bill_address
        if bill_address is not None:
            country = bill_address.country
            fill_missing(parameters, "billing_address", {
                "address1": bill_address.address1,
                "address2": bill_address.address2,
                "company": bill_address.company,
                "city": bill_address.city,
                "state": bill_address.state_text,
                "zip": bill_address.zipcode,
                "country": country.iso if country is not None else None,
                "country_name": country.name if country is not None else None,
            })

        parameters["verify_card"] = True
        return parameters

    def adjust_options_for_braintree(self, source: PaymentSource, options: Dict[str, Any]) -> None:
        self.adjust_billing_address(source, options)

    def adjust_billing_address(self, source: PaymentSource, options: Dict[str, Any]) -> None:
        # Billing and shipping addresses are sent even for vaulted customers.
        pass
