"""
Stripe adapter. Everything the rest of the project knows about the card
processor goes through StripeGateway; amounts cross this boundary in minor
units only.

Error mapping:
- stripe.error.CardError -> CardDeclined (business failure, 400)
- stripe.error.APIConnectionError -> GatewayTimeout (outcome unknown, 500)
- any other stripe.error.StripeError -> ExternalServiceError (500)
"""
from dataclasses import dataclass, field
from typing import Optional
import logging

import stripe
from django.conf import settings

from core_backend.exceptions import BusinessRuleViolation, ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)


class CardDeclined(BusinessRuleViolation):
    default_message = "Your card was declined"

    def __init__(self, message=None, details=None, payment_intent_id=None):
        super().__init__(message, details)
        self.payment_intent_id = payment_intent_id


class GatewayTimeout(ExternalServiceError):
    """
    The request may or may not have reached Stripe. Never treat this as a
    failed charge; reconcile through the intent id or the idempotency key.
    """

    default_message = "Payment provider did not respond; the payment outcome is unknown"


@dataclass
class GatewayIntent:
    id: str
    status: str
    amount: int = 0
    currency: str = ""
    client_secret: Optional[str] = None
    error_message: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def requires_action(self) -> bool:
        return self.status == "requires_action"

    @classmethod
    def from_stripe(cls, intent) -> "GatewayIntent":
        last_error = intent.get("last_payment_error") or {}
        return cls(
            id=intent["id"],
            status=intent["status"],
            amount=intent.get("amount") or 0,
            currency=intent.get("currency") or "",
            client_secret=intent.get("client_secret"),
            error_message=last_error.get("message"),
            metadata=dict(intent.get("metadata") or {}),
        )


@dataclass
class GatewayRefund:
    id: str
    status: str
    amount: int


class StripeGateway:
    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES

    def _call(self, operation: str, func, *args, **kwargs):
        try:
            return func(*args, api_key=self.api_key, **kwargs)
        except stripe.error.CardError as e:
            intent = getattr(e.error, "payment_intent", None) or {}
            logger.warning(f"Stripe {operation}: card declined ({e.code}): {e.user_message}")
            raise CardDeclined(
                e.user_message or str(e),
                details={"code": e.code},
                payment_intent_id=intent.get("id"),
            )
        except stripe.error.APIConnectionError as e:
            logger.error(f"Stripe {operation}: connection failed, outcome unknown: {e}")
            raise GatewayTimeout()
        except stripe.error.StripeError as e:
            logger.error(f"Stripe {operation} failed: {e}", exc_info=True)
            raise ExternalServiceError(e.user_message or "Payment provider error")

    def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: Optional[dict] = None,
        customer_id: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> GatewayIntent:
        params = {
            "amount": amount_minor,
            "currency": currency.lower(),
            "metadata": metadata or {},
        }
        if customer_id:
            params["customer"] = customer_id
        if payment_method_id:
            params["payment_method"] = payment_method_id
            params["confirm"] = True
            params["automatic_payment_methods"] = {"enabled": True, "allow_redirects": "never"}
        else:
            params["automatic_payment_methods"] = {"enabled": True}

        intent = self._call(
            "create_payment_intent",
            stripe.PaymentIntent.create,
            idempotency_key=idempotency_key,
            **params,
        )
        logger.info(f"Stripe intent {intent['id']} created ({amount_minor} {currency}): {intent['status']}")
        return GatewayIntent.from_stripe(intent)

    def confirm_payment_intent(self, intent_id: str, payment_method_id: Optional[str] = None) -> GatewayIntent:
        params = {}
        if payment_method_id:
            params["payment_method"] = payment_method_id
        intent = self._call("confirm_payment_intent", stripe.PaymentIntent.confirm, intent_id, **params)
        return GatewayIntent.from_stripe(intent)

    def retrieve_payment_intent(self, intent_id: str) -> GatewayIntent:
        intent = self._call("retrieve_payment_intent", stripe.PaymentIntent.retrieve, intent_id)
        return GatewayIntent.from_stripe(intent)

    def create_refund(self, intent_id: str, amount_minor: Optional[int] = None) -> GatewayRefund:
        params = {"payment_intent": intent_id}
        if amount_minor:
            params["amount"] = amount_minor
        refund = self._call("create_refund", stripe.Refund.create, **params)
        logger.info(f"Stripe refund {refund['id']} for intent {intent_id}: {refund['status']}")
        return GatewayRefund(id=refund["id"], status=refund["status"], amount=refund["amount"])

    def get_or_create_customer(self, email: str, user_id: Optional[str] = None) -> str:
        existing = self._call("list_customers", stripe.Customer.list, email=email, limit=1)
        if existing["data"]:
            return existing["data"][0]["id"]

        customer = self._call(
            "create_customer",
            stripe.Customer.create,
            email=email,
            metadata={"user_id": user_id} if user_id else {},
        )
        return customer["id"]

    @staticmethod
    def construct_webhook_event(payload, signature: Optional[str]):
        secret = settings.STRIPE_WEBHOOK_SECRET
        if not signature or not secret:
            raise ValidationError("Missing signature or webhook secret")
        try:
            return stripe.Webhook.construct_event(payload, signature, secret)
        except ValueError as e:
            logger.error(f"Stripe webhook: Invalid payload - {e}")
            raise ValidationError("Invalid payload")
        except stripe.error.SignatureVerificationError as e:
            logger.error(f"Stripe webhook: Invalid signature - {e}")
            raise ValidationError("Invalid signature")
