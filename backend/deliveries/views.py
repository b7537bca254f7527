import logging

from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsStaffMember, is_staff, user_id_for
from orders.services import OrderService

from .filters import DeliveryFilter
from .models import Delivery
from .permissions import CanViewDelivery
from .serializers import (
    AssignDriverSerializer,
    CreateDeliverySerializer,
    DeliverySerializer,
    DriverLocationSerializer,
    MarkDeliveredSerializer,
    MarkFailedSerializer,
)
from .services import DeliveryService

logger = logging.getLogger(__name__)


class DeliveryListCreateView(generics.ListAPIView):
    """
    GET: staff see every delivery, drivers see the ones assigned to them.
    POST: dispatch opens a delivery for a delivery order (staff only).
    """

    serializer_class = DeliverySerializer
    filterset_class = DeliveryFilter

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsStaffMember()]
        return [IsAuthenticated()]

    def get_queryset(self):
        if is_staff(self.request):
            return DeliveryService.list_deliveries()
        return DeliveryService.list_deliveries(driver_id=user_id_for(self.request))

    def post(self, request, *args, **kwargs):
        serializer = CreateDeliverySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        order = OrderService.get_order(data.pop("order_id"))
        delivery = DeliveryService.create_delivery(order, **data)
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)


class DeliveryDetailView(APIView):
    permission_classes = [IsAuthenticated, CanViewDelivery]

    def get(self, request, pk, *args, **kwargs):
        delivery = DeliveryService.get_delivery(pk)
        self.check_object_permissions(request, delivery)
        return Response(DeliverySerializer(delivery).data)


class DeliveryForOrderView(APIView):
    """Lets a customer track the delivery of their own order."""

    permission_classes = [IsAuthenticated, CanViewDelivery]

    def get(self, request, order_id, *args, **kwargs):
        delivery = DeliveryService.get_delivery_for_order(order_id)
        self.check_object_permissions(request, delivery)
        return Response(DeliverySerializer(delivery).data)


class AssignDriverView(APIView):
    permission_classes = [IsStaffMember]

    def post(self, request, pk, *args, **kwargs):
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        delivery = DeliveryService.assign_driver(pk, serializer.validated_data["driver_id"])
        return Response(DeliverySerializer(delivery).data)


class DriverActionView(APIView):
    """
    Base view for actions only the assigned driver may take. Subclasses
    implement ``perform`` and return the updated delivery.
    """

    permission_classes = [IsAuthenticated]

    def perform(self, request, pk, driver_id) -> Delivery:
        raise NotImplementedError

    def post(self, request, pk, *args, **kwargs):
        delivery = self.perform(request, pk, user_id_for(request))
        return Response(DeliverySerializer(delivery).data)


class AcceptDeliveryView(DriverActionView):
    def perform(self, request, pk, driver_id):
        return DeliveryService.accept_delivery(pk, driver_id)


class MarkPickedUpView(DriverActionView):
    def perform(self, request, pk, driver_id):
        return DeliveryService.mark_picked_up(pk, driver_id)


class MarkDeliveredView(DriverActionView):
    def perform(self, request, pk, driver_id):
        serializer = MarkDeliveredSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return DeliveryService.mark_delivered(pk, driver_id, serializer.validated_data["driver_notes"])


class DriverLocationView(DriverActionView):
    def perform(self, request, pk, driver_id):
        serializer = DriverLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return DeliveryService.update_driver_location(
            pk,
            driver_id,
            serializer.validated_data["latitude"],
            serializer.validated_data["longitude"],
        )


class MarkFailedView(DriverActionView):
    """Staff can fail any delivery; a driver only their own."""

    def perform(self, request, pk, driver_id):
        serializer = MarkFailedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if is_staff(request):
            driver_id = None
        return DeliveryService.mark_failed(pk, serializer.validated_data["reason"], driver_id=driver_id)
