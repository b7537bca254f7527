from django.urls import path

from .views import (
    AcceptDeliveryView,
    AssignDriverView,
    DeliveryDetailView,
    DeliveryForOrderView,
    DeliveryListCreateView,
    DriverLocationView,
    MarkDeliveredView,
    MarkFailedView,
    MarkPickedUpView,
)

app_name = "deliveries"

urlpatterns = [
    path("", DeliveryListCreateView.as_view(), name="delivery-list"),
    path("order/<uuid:order_id>/", DeliveryForOrderView.as_view(), name="delivery-for-order"),
    path("<uuid:pk>/", DeliveryDetailView.as_view(), name="delivery-detail"),
    path("<uuid:pk>/assign/", AssignDriverView.as_view(), name="delivery-assign"),
    path("<uuid:pk>/accept/", AcceptDeliveryView.as_view(), name="delivery-accept"),
    path("<uuid:pk>/location/", DriverLocationView.as_view(), name="delivery-location"),
    path("<uuid:pk>/picked-up/", MarkPickedUpView.as_view(), name="delivery-picked-up"),
    path("<uuid:pk>/delivered/", MarkDeliveredView.as_view(), name="delivery-delivered"),
    path("<uuid:pk>/failed/", MarkFailedView.as_view(), name="delivery-failed"),
]
