import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsStaffMember
from orders.services import OrderService

from .serializers import (
    GiftCardAdminSerializer,
    GiftCardBalanceSerializer,
    GiftCardCodeSerializer,
    GiftCardCreateSerializer,
    GiftCardSerializer,
    GiftCardTransactionSerializer,
    GiftCardUseSerializer,
)
from .services import GiftCardService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Gift card not found"


def error_status(message):
    if message == NOT_FOUND_MESSAGE:
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


class CheckBalanceView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = GiftCardCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        balance = GiftCardService.check_balance(serializer.validated_data["code"])
        return Response(GiftCardBalanceSerializer(balance).data)


class ValidateGiftCardView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = GiftCardCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = GiftCardService.validate_gift_card(data["code"], pin=data.get("pin") or None)
        if not result.valid:
            return Response({"valid": False, "error": result.error}, status=error_status(result.error))

        return Response({"valid": True, "balance": str(result.balance)})


class UseGiftCardView(APIView):
    """
    Spend part of a gift card balance, optionally against an existing order.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = GiftCardUseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.get_order(data["order_id"]) if data.get("order_id") else None
        result = GiftCardService.use_gift_card(
            data["code"], data["amount"], order=order, pin=data.get("pin") or None
        )
        if not result.success:
            return Response({"success": False, "error": result.error}, status=error_status(result.error))

        return Response(
            {
                "success": True,
                "amount": str(result.amount),
                "remaining_balance": str(result.remaining_balance),
                "gift_card": GiftCardSerializer(result.gift_card).data,
                "transaction": GiftCardTransactionSerializer(result.transaction).data,
            }
        )


class GiftCardListCreateView(generics.ListAPIView):
    """
    Staff issue and browse gift cards. The plain PIN is returned once, in
    the POST response, and is not recoverable afterwards.
    """

    serializer_class = GiftCardAdminSerializer
    permission_classes = [IsStaffMember]

    def get_queryset(self):
        return GiftCardService.list_gift_cards(status=self.request.query_params.get("status") or None)

    def post(self, request, *args, **kwargs):
        serializer = GiftCardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        gift_card, pin = GiftCardService.create_gift_card(
            data["amount"],
            with_pin=data["with_pin"],
            expires_at=data.get("expires_at"),
            purchased_by_id=data.get("purchased_by_id") or None,
            recipient_email=data.get("recipient_email", ""),
            recipient_name=data.get("recipient_name", ""),
            message=data.get("message", ""),
        )
        payload = GiftCardAdminSerializer(gift_card).data
        payload["pin"] = pin
        return Response(payload, status=status.HTTP_201_CREATED)


class GiftCardDetailView(APIView):
    permission_classes = [IsStaffMember]

    def get(self, request, pk, *args, **kwargs):
        gift_card = GiftCardService.get_gift_card(pk)
        payload = GiftCardAdminSerializer(gift_card).data
        payload["transactions"] = GiftCardTransactionSerializer(
            GiftCardService.get_transactions(gift_card), many=True
        ).data
        return Response(payload)
