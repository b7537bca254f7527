from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import user_id_for

from .serializers import LoyaltyAccountSerializer, LoyaltyTransactionSerializer, RedeemPreviewSerializer
from .services import HISTORY_LIMIT, LoyaltyService


class LoyaltyAccountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        account = LoyaltyService.get_or_create_account(user_id_for(request))
        return Response(LoyaltyAccountSerializer(account).data)


class LoyaltyTransactionListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            limit = min(int(request.query_params.get("limit", HISTORY_LIMIT)), HISTORY_LIMIT)
        except ValueError:
            limit = HISTORY_LIMIT
        history = LoyaltyService.get_transaction_history(user_id_for(request), limit=limit)
        return Response(LoyaltyTransactionSerializer(history, many=True).data)


class RedeemPreviewView(APIView):
    """
    Quote the discount a number of points is worth. Points are only
    deducted at checkout.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RedeemPreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        points = serializer.validated_data["points"]

        account = LoyaltyService.get_or_create_account(user_id_for(request))
        if points > account.points:
            return Response({"error": "Insufficient points"}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"points": points, "discount": str(LoyaltyService.get_points_value(points))})
