import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsStaffMember, is_staff, user_id_for
from payments.serializers import PaymentSerializer
from payments.services import PaymentService

from .filters import OrderFilter
from .models import Order
from .permissions import CanViewOrder
from .serializers import CheckoutSerializer, OrderSerializer, UpdateOrderStatusSerializer
from .services import CheckoutService, OrderService

logger = logging.getLogger(__name__)


class OrderListCreateView(generics.ListAPIView):
    """
    GET: orders visible to the caller (staff see every order).
    POST: checkout a cart into a new order; guests are allowed.
    """

    serializer_class = OrderSerializer
    filterset_class = OrderFilter

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = Order.objects.prefetch_related("items__modifiers").order_by("-placed_at")
        if not is_staff(self.request):
            queryset = queryset.filter(user_id=user_id_for(self.request))
        return queryset

    def post(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        order = CheckoutService.checkout(
            order_type=data.pop("order_type"),
            items=data.pop("items"),
            user_id=user_id_for(request),
            coupon_code=data.pop("coupon_code") or None,
            loyalty_points=data.pop("loyalty_points"),
            gift_card_code=data.pop("gift_card_code") or None,
            gift_card_pin=data.pop("gift_card_pin") or None,
            tip=data.pop("tip"),
            **data,
        )
        order = OrderService.get_order(order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    permission_classes = [AllowAny, CanViewOrder]

    def get(self, request, pk, *args, **kwargs):
        order = OrderService.get_order(pk)
        self.check_object_permissions(request, order)
        return Response(OrderSerializer(order).data)


class OrderByNumberView(APIView):
    permission_classes = [AllowAny, CanViewOrder]

    def get(self, request, order_number, *args, **kwargs):
        order = OrderService.get_order_by_number(order_number)
        self.check_object_permissions(request, order)
        return Response(OrderSerializer(order).data)


class OrderStatusView(APIView):
    """
    Move an order along its status table (kitchen and dispatch staff).
    """

    permission_classes = [IsStaffMember]

    def patch(self, request, pk, *args, **kwargs):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.get_order(pk)
        order = OrderService.update_order_status(
            order,
            serializer.validated_data["status"],
            reason=serializer.validated_data["reason"] or None,
        )
        return Response(OrderSerializer(order).data)


class OrderPaymentsView(APIView):
    permission_classes = [IsAuthenticated, CanViewOrder]

    def get(self, request, pk, *args, **kwargs):
        order = OrderService.get_order(pk)
        self.check_object_permissions(request, order)
        payments = PaymentService.list_for_order(order)
        return Response(PaymentSerializer(payments, many=True).data)
