import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsStaffMember, user_id_for

from .serializers import (
    ConfirmPaymentSerializer,
    PaymentSerializer,
    ProcessPaymentSerializer,
    RefundSerializer,
)
from .services import PaymentResult, PaymentService

logger = logging.getLogger(__name__)


def payment_response(result: PaymentResult):
    """
    Business failures (declined card, unsupported method) are a 400 with
    ``success: false``; successes include the payment and, for card
    payments still waiting on the customer, the client secret.
    """
    if not result.success:
        body = {"success": False, "error": result.error}
        if result.payment is not None:
            body["payment_id"] = str(result.payment.id)
        return Response(body, status=status.HTTP_400_BAD_REQUEST)

    body = {
        "success": True,
        "payment": PaymentSerializer(result.payment).data if result.payment else None,
        "payment_intent_id": result.payment_intent_id,
        "requires_action": result.requires_action,
    }
    if result.client_secret:
        body["client_secret"] = result.client_secret
    if result.refund_id:
        body["refund_id"] = result.refund_id
    return Response(body)


class ProcessPaymentView(APIView):
    """
    Charge an order. Guests pay for their own orders at checkout, so this is open.
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = PaymentService.process_payment(
            order_id=data["order_id"],
            amount=data["amount"],
            method=data["payment_method"],
            payment_method_id=data.get("payment_method_id") or None,
            customer_email=data.get("customer_email") or None,
            user_id=user_id_for(request),
        )
        return payment_response(result)


class ConfirmPaymentView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = PaymentService.confirm_payment_intent(
            data["payment_intent_id"], payment_method_id=data.get("payment_method_id") or None
        )
        return payment_response(result)


class PaymentDetailView(APIView):
    permission_classes = [IsStaffMember]

    def get(self, request, pk, *args, **kwargs):
        return Response(PaymentSerializer(PaymentService.get_payment(pk)).data)


class RefundPaymentView(APIView):
    """
    Full or partial refund of a completed card payment (staff only).
    """

    permission_classes = [IsStaffMember]

    def post(self, request, pk, *args, **kwargs):
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PaymentService.create_refund(pk, amount=serializer.validated_data.get("amount"))
        return payment_response(result)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    """
    Stripe calls this endpoint; the signature header is the only credential.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        event_type = PaymentService.handle_webhook_event(
            request.body, request.META.get("HTTP_STRIPE_SIGNATURE")
        )
        logger.info(f"Stripe webhook processed: {event_type}")
        return Response({"received": True})
