import logging

from rest_framework.response import Response
from rest_framework.views import APIView

from .models import RestaurantSettings
from .permissions import SettingsReadOnlyOrStaff
from .serializers import RestaurantSettingsSerializer

logger = logging.getLogger(__name__)


class RestaurantSettingsView(APIView):
    """
    API endpoint for viewing and editing the single RestaurantSettings object.
    """

    permission_classes = [SettingsReadOnlyOrStaff]

    def get(self, request):
        serializer = RestaurantSettingsSerializer(RestaurantSettings.load())
        return Response(serializer.data)

    def patch(self, request):
        instance = RestaurantSettings.load()
        serializer = RestaurantSettingsSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Restaurant settings updated by user {request.user.pk}: {sorted(request.data.keys())}")
        return Response(serializer.data)
