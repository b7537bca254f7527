import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsStaffMember, user_id_for

from .serializers import (
    CouponAdminSerializer,
    CouponSerializer,
    CouponValidateSerializer,
    CouponWriteSerializer,
)
from .services import CouponService

logger = logging.getLogger(__name__)


class CouponListCreateView(generics.ListAPIView):
    """
    Back-office coupon management (staff only).
    GET accepts ``status`` and ``active=true``; POST creates a coupon.
    """

    serializer_class = CouponAdminSerializer
    permission_classes = [IsStaffMember]

    def get_queryset(self):
        params = self.request.query_params
        return CouponService.list_coupons(
            status=params.get("status") or None,
            active_only=params.get("active") == "true",
        )

    def post(self, request, *args, **kwargs):
        serializer = CouponWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        coupon = CouponService.create_coupon(**serializer.validated_data)
        return Response(CouponAdminSerializer(coupon).data, status=status.HTTP_201_CREATED)


class CouponDetailView(APIView):
    """
    GET and PATCH a single coupon. DELETE deactivates it; usage history
    keeps the row.
    """

    permission_classes = [IsStaffMember]

    def get(self, request, pk, *args, **kwargs):
        coupon = CouponService.get_coupon(pk)
        return Response(CouponAdminSerializer(coupon).data)

    def patch(self, request, pk, *args, **kwargs):
        coupon = CouponService.get_coupon(pk)
        serializer = CouponWriteSerializer(coupon, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        coupon = CouponService.update_coupon(coupon, **serializer.validated_data)
        return Response(CouponAdminSerializer(coupon).data)

    def delete(self, request, pk, *args, **kwargs):
        coupon = CouponService.deactivate_coupon(CouponService.get_coupon(pk))
        return Response(CouponAdminSerializer(coupon).data)


class ValidateCouponView(APIView):
    """
    Check whether a code can be used for a cart subtotal.
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = CouponValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CouponService.validate_coupon(
            data["code"], user_id=user_id_for(request), order_subtotal=data["subtotal"]
        )
        if not result.valid:
            return Response({"valid": False, "error": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"valid": True, "coupon": CouponSerializer(result.coupon).data})


class ApplyCouponView(APIView):
    """
    Price a coupon against a cart. Nothing is recorded until checkout.
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = CouponValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CouponService.apply_coupon(
            data["code"],
            user_id=user_id_for(request),
            subtotal=data["subtotal"],
            delivery_fee=data["delivery_fee"],
        )
        if not result.success:
            return Response({"valid": False, "error": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "valid": True,
                "coupon": CouponSerializer(result.coupon).data,
                "discount": str(result.discount),
                "supported": result.supported,
            }
        )
