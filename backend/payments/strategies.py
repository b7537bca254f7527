from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from core_backend.exceptions import BusinessRuleViolation

from .gateway import GatewayIntent, StripeGateway
from .models import Payment
from .money import ZERO, from_minor, to_minor

logger = logging.getLogger(__name__)

PENDING_INTENT_STATUSES = {"requires_action", "requires_confirmation", "requires_capture", "processing"}


@dataclass
class StrategyResult:
    """What a strategy learned from the provider, before it is applied to the Payment row."""

    status: str
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    requires_action: bool = False
    failure_reason: Optional[str] = None
    refund_id: Optional[str] = None
    refunded_amount: Decimal = ZERO


def result_from_intent(intent: GatewayIntent, on_create: bool = False) -> StrategyResult:
    """
    Map a gateway intent onto a local payment status.

    A freshly created intent that still waits for the customer's card is
    PROCESSING, not FAILED, unless the gateway already recorded a card error
    on it. On confirmation the same status means the card was refused. A
    canceled intent is always FAILED.
    """
    awaiting_card = (
        on_create and intent.status == "requires_payment_method" and not intent.error_message
    )
    if intent.succeeded:
        status = Payment.PaymentStatus.COMPLETED
    elif awaiting_card or intent.status in PENDING_INTENT_STATUSES:
        status = Payment.PaymentStatus.PROCESSING
    else:
        status = Payment.PaymentStatus.FAILED

    failure_reason = None
    if status == Payment.PaymentStatus.FAILED:
        default = "Payment canceled" if intent.status == "canceled" else "Payment failed"
        failure_reason = intent.error_message or default

    return StrategyResult(
        status=status,
        payment_intent_id=intent.id,
        client_secret=intent.client_secret,
        requires_action=intent.requires_action,
        failure_reason=failure_reason,
    )


class PaymentStrategy(ABC):
    """
    The Abstract Base Class for a payment strategy.
    Defines the common interface for all payment methods.
    """

    supported = True
    # True when authorize() settles the charge without a provider round trip
    settles_immediately = False

    @abstractmethod
    def authorize(self, payment: Payment, payment_method_id=None, customer_id=None) -> StrategyResult:
        """Start the charge for a freshly persisted payment attempt."""

    @abstractmethod
    def confirm(self, payment: Payment, payment_method_id=None) -> StrategyResult:
        """Finish an asynchronous charge (3-D Secure and similar)."""

    @abstractmethod
    def refund(self, payment: Payment, amount: Optional[Decimal] = None) -> StrategyResult:
        """Give money back. ``amount=None`` refunds the full payment."""


class CashPaymentStrategy(PaymentStrategy):
    """
    A simple strategy for handling cash payments.
    No external API calls are needed; a recorded cash payment is complete.
    """

    settles_immediately = True

    def authorize(self, payment, payment_method_id=None, customer_id=None):
        return StrategyResult(status=Payment.PaymentStatus.COMPLETED)

    def confirm(self, payment, payment_method_id=None):
        raise BusinessRuleViolation("Cash payments do not need confirmation")

    def refund(self, payment, amount=None):
        raise BusinessRuleViolation("Refund only supported for card payments")


class CardPaymentStrategy(PaymentStrategy):
    """
    Card payments through Stripe PaymentIntents.
    """

    def __init__(self, gateway: Optional[StripeGateway] = None):
        self.gateway = gateway or StripeGateway()

    def authorize(self, payment, payment_method_id=None, customer_id=None):
        intent = self.gateway.create_payment_intent(
            amount_minor=to_minor(payment.currency, payment.amount),
            currency=payment.currency,
            metadata={
                "order_id": str(payment.order_id),
                "payment_id": str(payment.id),
            },
            customer_id=customer_id,
            payment_method_id=payment_method_id,
            idempotency_key=payment.idempotency_key or None,
        )
        return result_from_intent(intent, on_create=True)

    def retrieve(self, payment) -> StrategyResult:
        """Current state of an attempt that already has an intent. A canceled intent fails the attempt."""
        intent = self.gateway.retrieve_payment_intent(payment.payment_intent_id)
        return result_from_intent(intent, on_create=True)

    def confirm(self, payment, payment_method_id=None):
        # The intent may already be settled (webhook or client-side confirm).
        intent = self.gateway.retrieve_payment_intent(payment.payment_intent_id)
        if not intent.succeeded and (payment_method_id or intent.status == "requires_confirmation"):
            intent = self.gateway.confirm_payment_intent(payment.payment_intent_id, payment_method_id)
        return result_from_intent(intent)

    def refund(self, payment, amount=None):
        amount_minor = to_minor(payment.currency, amount) if amount is not None else None
        refund = self.gateway.create_refund(payment.payment_intent_id, amount_minor)
        if refund.status not in ("succeeded", "pending"):
            raise BusinessRuleViolation(f"Refund {refund.status}")
        return StrategyResult(
            status=Payment.PaymentStatus.REFUNDED,
            payment_intent_id=payment.payment_intent_id,
            refund_id=refund.id,
            refunded_amount=from_minor(payment.currency, refund.amount),
        )


class UnsupportedPaymentStrategy(PaymentStrategy):
    """
    Known payment methods without an integration yet (PayPal, wallets).
    Callers check ``supported`` and report a business failure instead of
    calling the hooks.
    """

    supported = False

    def __init__(self, method: str):
        self.method = method

    @property
    def message(self) -> str:
        return f"Payment method {self.method} not yet implemented"

    def authorize(self, payment, payment_method_id=None, customer_id=None):
        raise BusinessRuleViolation(self.message)

    def confirm(self, payment, payment_method_id=None):
        raise BusinessRuleViolation(self.message)

    def refund(self, payment, amount=None):
        raise BusinessRuleViolation("Refund only supported for card payments")
