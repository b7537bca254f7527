from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import user_id_for

from .serializers import NotificationListParamsSerializer, NotificationSerializer
from .services import NotificationService


class NotificationListView(APIView):
    """
    The caller's inbox, newest first.
    Query params: ``unread_only``, ``limit`` (max 100) and ``offset``.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        params = NotificationListParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        notifications = NotificationService.list_for_user(user_id_for(request), **params.validated_data)
        return Response(NotificationSerializer(notifications, many=True).data)


class NotificationDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk, *args, **kwargs):
        NotificationService.delete(pk, user_id_for(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class MarkNotificationReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        notification = NotificationService.mark_read(pk, user_id_for(request))
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        updated = NotificationService.mark_all_read(user_id_for(request))
        return Response({"updated": updated})


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response({"count": NotificationService.unread_count(user_id_for(request))})
