from django.urls import path

from .views import (
    MarkAllReadView,
    MarkNotificationReadView,
    NotificationDetailView,
    NotificationListView,
    UnreadCountView,
)

app_name = "notifications"

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification-list"),
    path("read-all/", MarkAllReadView.as_view(), name="notification-read-all"),
    path("unread-count/", UnreadCountView.as_view(), name="notification-unread-count"),
    path("<uuid:pk>/", NotificationDetailView.as_view(), name="notification-detail"),
    path("<uuid:pk>/read/", MarkNotificationReadView.as_view(), name="notification-read"),
]
