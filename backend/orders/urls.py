from django.urls import path

from .views import (
    OrderByNumberView,
    OrderDetailView,
    OrderListCreateView,
    OrderPaymentsView,
    OrderStatusView,
)

app_name = "orders"

urlpatterns = [
    path("orders/", OrderListCreateView.as_view(), name="order-list"),
    path("orders/number/<str:order_number>/", OrderByNumberView.as_view(), name="order-by-number"),
    path("orders/<uuid:pk>/", OrderDetailView.as_view(), name="order-detail"),
    path("orders/<uuid:pk>/status/", OrderStatusView.as_view(), name="order-status"),
    path("orders/<uuid:pk>/payments/", OrderPaymentsView.as_view(), name="order-payments"),
]
