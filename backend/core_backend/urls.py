"""
URL configuration for core_backend project.

Each app registers its own endpoints; they are all mounted under /api/.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/settings/", include("settings.urls")),
    # The orders app registers its own "orders/" prefix.
    path("api/", include("orders.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/coupons/", include("coupons.urls")),
    path("api/gift-cards/", include("giftcards.urls")),
    path("api/loyalty/", include("loyalty.urls")),
    path("api/deliveries/", include("deliveries.urls")),
    path("api/notifications/", include("notifications.urls")),
]
