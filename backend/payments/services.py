from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Optional
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from orders.models import Order
from settings.config import app_settings

from .factories import PaymentStrategyFactory
from .gateway import CardDeclined, StripeGateway
from .models import Payment
from .money import amounts_match, quantize, to_decimal
from .signals import payment_completed, payment_failed
from .strategies import CardPaymentStrategy, StrategyResult

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    success: bool
    payment: Optional[Payment] = None
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    requires_action: bool = False
    refund_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def payment_id(self):
        return self.payment.id if self.payment else None


class PaymentService:
    """
    Payment orchestrator: reconciles the amount against the order, runs the
    method's strategy and applies the outcome to the payment and the order
    together.

    Every status change of an existing payment goes through _apply_status
    with the payment row locked, so confirmation, webhooks and retries are
    idempotent.
    """

    @staticmethod
    def _lock_order(order_id) -> Order:
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Order not found")

    @staticmethod
    def _check_payable(order: Order, amount: Decimal) -> None:
        if order.payment_status == Order.PaymentStatus.PAID:
            raise BusinessRuleViolation("Order is already paid")
        if order.status == Order.OrderStatus.CANCELLED:
            raise BusinessRuleViolation("Cannot pay for a cancelled order")
        if not amounts_match(order.total, amount):
            logger.warning(f"Order {order.order_number}: amount mismatch {amount} != {order.total}")
            raise BusinessRuleViolation(f"Amount mismatch. Expected {order.total}, got {amount}")

    @staticmethod
    def process_payment(
        order_id,
        amount,
        method: str,
        payment_method_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        user_id=None,
        metadata: Optional[dict] = None,
    ) -> PaymentResult:
        """
        Charge an order.

        Raises:
            NotFoundError: the order does not exist
            ValidationError: unknown payment method or malformed amount
            BusinessRuleViolation: amount mismatch, order already paid
            GatewayTimeout: the gateway did not answer; the attempt stays PROCESSING
        """
        strategy = PaymentStrategyFactory.get_strategy(method)
        try:
            amount = to_decimal(amount)
        except (ArithmeticError, TypeError, ValueError):
            raise ValidationError("Amount must be a number")

        if strategy.settles_immediately:
            return PaymentService._process_immediate(order_id, amount, method, strategy, metadata)

        with transaction.atomic():
            order = PaymentService._lock_order(order_id)
            PaymentService._check_payable(order, amount)
            if not strategy.supported:
                logger.warning(f"Order {order.order_number}: {strategy.message}")
                return PaymentResult(success=False, error=strategy.message)

            payment = PaymentService._get_or_create_card_attempt(order, metadata)

        if payment.payment_intent_id:
            # A previous call already reached the gateway; report that intent.
            return PaymentService._resume_attempt(payment, strategy)

        customer_id = payment.customer_id or None
        if customer_email and not customer_id and isinstance(strategy, CardPaymentStrategy):
            customer_id = strategy.gateway.get_or_create_customer(
                customer_email, str(user_id) if user_id else None
            )

        with transaction.atomic():
            payment = Payment.objects.select_for_update().select_related("order").get(pk=payment.pk)
            try:
                result = strategy.authorize(payment, payment_method_id=payment_method_id, customer_id=customer_id)
            except CardDeclined as e:
                payment.payment_intent_id = e.payment_intent_id or payment.payment_intent_id
                payment.customer_id = customer_id or ""
                payment.save(update_fields=["payment_intent_id", "customer_id", "updated_at"])
                PaymentService._apply_status(payment, Payment.PaymentStatus.FAILED, e.message)
                return PaymentResult(success=False, payment=payment, error=e.message)

            payment.payment_intent_id = result.payment_intent_id
            payment.customer_id = customer_id or ""
            payment.save(update_fields=["payment_intent_id", "customer_id", "updated_at"])
            PaymentService._apply_status(payment, result.status, result.failure_reason)

        return PaymentService._result(payment, result)

    @staticmethod
    @transaction.atomic
    def _process_immediate(order_id, amount: Decimal, method: str, strategy, metadata=None) -> PaymentResult:
        order = PaymentService._lock_order(order_id)
        PaymentService._check_payable(order, amount)

        payment = Payment.objects.create(
            order=order,
            amount=quantize(app_settings.currency, amount),
            currency=app_settings.currency,
            payment_method=method,
            metadata=metadata or {},
        )
        result = strategy.authorize(payment)
        PaymentService._apply_status(payment, result.status, result.failure_reason)
        logger.info(f"Order {order.order_number}: {method} payment {payment.amount} recorded")
        return PaymentResult(success=True, payment=payment)

    @staticmethod
    def _get_or_create_card_attempt(order: Order, metadata=None) -> Payment:
        """
        Reuse a PROCESSING card attempt for this order if one exists, so a
        client retry after a gateway timeout resends the same idempotency key
        instead of starting a second charge.
        """
        pending = (
            Payment.objects.filter(
                order=order,
                payment_method=Payment.PaymentMethod.CARD,
                status=Payment.PaymentStatus.PROCESSING,
                amount=order.total,
            )
            .order_by("-created_at")
            .first()
        )
        if pending:
            logger.info(f"Order {order.order_number}: reusing pending payment {pending.id}")
            return pending

        payment = Payment(
            order=order,
            amount=order.total,
            currency=app_settings.currency,
            payment_method=Payment.PaymentMethod.CARD,
            metadata=metadata or {},
        )
        payment.idempotency_key = f"payment-{payment.id}"
        payment.save()
        return payment

    @staticmethod
    @transaction.atomic
    def _resume_attempt(payment: Payment, strategy: CardPaymentStrategy) -> PaymentResult:
        payment = Payment.objects.select_for_update().select_related("order").get(pk=payment.pk)
        result = strategy.retrieve(payment)
        # A FAILED attempt is no longer PROCESSING, so the next call starts a new intent.
        PaymentService._apply_status(payment, result.status, result.failure_reason)
        return PaymentService._result(payment, result)

    @staticmethod
    def _result(payment: Payment, result: StrategyResult) -> PaymentResult:
        if payment.status == Payment.PaymentStatus.FAILED:
            return PaymentResult(
                success=False,
                payment=payment,
                payment_intent_id=payment.payment_intent_id,
                error=payment.failure_reason,
            )
        return PaymentResult(
            success=True,
            payment=payment,
            payment_intent_id=payment.payment_intent_id,
            client_secret=result.client_secret,
            requires_action=result.requires_action,
        )

    @staticmethod
    def _apply_status(payment: Payment, new_status: str, failure_reason: Optional[str] = None) -> bool:
        """
        Move a locked payment to ``new_status``. Repeating the current status
        is a no-op, and a COMPLETED or REFUNDED payment is never downgraded
        by a late gateway event. Returns True when something changed.
        """
        old_status = payment.status
        if old_status == new_status:
            return False
        if old_status == Payment.PaymentStatus.REFUNDED or (
            old_status == Payment.PaymentStatus.COMPLETED and new_status != Payment.PaymentStatus.REFUNDED
        ):
            logger.warning(f"Payment {payment.id}: ignoring {new_status} after {old_status}")
            return False

        now = timezone.now()
        payment.status = new_status
        fields = ["status", "updated_at"]
        if new_status == Payment.PaymentStatus.COMPLETED:
            payment.processed_at = now
            payment.failure_reason = ""
            fields += ["processed_at", "failure_reason"]
        elif new_status == Payment.PaymentStatus.FAILED:
            payment.failure_reason = failure_reason or "Payment failed"
            fields.append("failure_reason")
        payment.save(update_fields=fields)
        logger.info(f"Payment {payment.id}: {old_status} -> {new_status}")

        if new_status == Payment.PaymentStatus.COMPLETED:
            PaymentService._on_completed(payment)
        elif new_status == Payment.PaymentStatus.FAILED:
            transaction.on_commit(
                partial(payment_failed.send, sender=Payment, payment=payment, order=payment.order)
            )
        return True

    @staticmethod
    def _on_completed(payment: Payment) -> None:
        """
        Mark the order PAID in the caller's transaction and, when the
        restaurant auto-accepts, confirm it in the same step.
        """
        from orders.services import OrderService

        order = Order.objects.select_for_update().get(pk=payment.order_id)
        OrderService.mark_as_paid(order)
        if app_settings.auto_accept_orders and order.status == Order.OrderStatus.PENDING:
            OrderService.update_order_status(order, Order.OrderStatus.CONFIRMED)
        payment.order = order

        transaction.on_commit(
            partial(payment_completed.send, sender=Payment, payment=payment, order=order)
        )

    @staticmethod
    @transaction.atomic
    def record_gift_card_payment(order: Order, amount) -> Payment:
        """
        Settle an order whose total a gift card covered in full during
        checkout. The gift card ledger already holds the deduction.
        """
        payment = Payment.objects.create(
            order=order,
            amount=quantize(app_settings.currency, amount),
            currency=app_settings.currency,
            payment_method=Payment.PaymentMethod.GIFT_CARD,
            metadata={"gift_card_code": order.gift_card_code},
        )
        PaymentService._apply_status(payment, Payment.PaymentStatus.COMPLETED)
        order.payment_status = Order.PaymentStatus.PAID
        return payment

    @staticmethod
    @transaction.atomic
    def confirm_payment_intent(intent_id: str, payment_method_id: Optional[str] = None) -> PaymentResult:
        """
        Finish an asynchronous card payment. The payment row stays locked
        while the gateway is asked, so concurrent confirmations serialize
        and only the first one applies PAID.
        """
        try:
            payment = Payment.objects.select_for_update().select_related("order").get(
                payment_intent_id=intent_id
            )
        except Payment.DoesNotExist:
            raise NotFoundError("Payment record not found")

        if payment.status in (Payment.PaymentStatus.COMPLETED, Payment.PaymentStatus.REFUNDED):
            return PaymentResult(success=True, payment=payment, payment_intent_id=intent_id)

        strategy = PaymentStrategyFactory.get_strategy(payment.payment_method)
        try:
            result = strategy.confirm(payment, payment_method_id=payment_method_id)
        except CardDeclined as e:
            PaymentService._apply_status(payment, Payment.PaymentStatus.FAILED, e.message)
            return PaymentResult(success=False, payment=payment, payment_intent_id=intent_id, error=e.message)
        PaymentService._apply_status(payment, result.status, result.failure_reason)
        return PaymentService._result(payment, result)

    @staticmethod
    @transaction.atomic
    def create_refund(payment_id, amount=None) -> PaymentResult:
        try:
            payment = Payment.objects.select_for_update().select_related("order").get(pk=payment_id)
        except (Payment.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Payment not found")

        if payment.payment_method != Payment.PaymentMethod.CARD or not payment.payment_intent_id:
            raise BusinessRuleViolation("Refund only supported for card payments")
        if payment.status != Payment.PaymentStatus.COMPLETED:
            raise BusinessRuleViolation(f"Cannot refund a {payment.status.lower()} payment")

        refundable = payment.amount - payment.refunded_amount
        if amount is not None:
            amount = quantize(payment.currency, amount)
            if amount <= 0:
                raise ValidationError("Refund amount must be greater than zero")
            if amount > refundable:
                raise ValidationError(f"Refund amount exceeds the refundable balance of {refundable}")

        strategy = PaymentStrategyFactory.get_strategy(payment.payment_method)
        result = strategy.refund(payment, amount)

        payment.refund_id = result.refund_id
        payment.refunded_amount += result.refunded_amount or (amount if amount is not None else refundable)
        payment.save(update_fields=["refund_id", "refunded_amount", "updated_at"])
        PaymentService._apply_status(payment, Payment.PaymentStatus.REFUNDED)

        from orders.services import OrderService

        OrderService.mark_as_refunded(payment.order)
        logger.info(f"Payment {payment.id}: refunded {payment.refunded_amount} ({result.refund_id})")
        return PaymentResult(success=True, payment=payment, refund_id=result.refund_id)

    @staticmethod
    def handle_webhook_event(payload, signature: Optional[str]) -> str:
        """
        Verify and apply a Stripe webhook. Returns the event type.
        """
        event = StripeGateway.construct_webhook_event(payload, signature)
        event_type = event["type"]
        intent = event["data"]["object"]

        if event_type == "payment_intent.succeeded":
            PaymentService._reconcile_intent(intent["id"], Payment.PaymentStatus.COMPLETED)
        elif event_type == "payment_intent.payment_failed":
            last_error = intent.get("last_payment_error") or {}
            PaymentService._reconcile_intent(
                intent["id"], Payment.PaymentStatus.FAILED, last_error.get("message") or "Payment failed"
            )
        else:
            logger.info(f"Stripe webhook: unhandled event type {event_type}")
        return event_type

    @staticmethod
    @transaction.atomic
    def _reconcile_intent(intent_id: str, status: str, failure_reason: Optional[str] = None) -> bool:
        payment = (
            Payment.objects.select_for_update()
            .select_related("order")
            .filter(payment_intent_id=intent_id)
            .first()
        )
        if payment is None:
            logger.error(f"Stripe webhook: payment not found for intent {intent_id}")
            return False
        return PaymentService._apply_status(payment, status, failure_reason)

    @staticmethod
    def get_payment(payment_id) -> Payment:
        try:
            return Payment.objects.select_related("order").get(pk=payment_id)
        except (Payment.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Payment not found")

    @staticmethod
    def list_for_order(order: Order):
        return Payment.objects.filter(order=order).order_by("-created_at")
