from django.urls import path

from .views import RestaurantSettingsView

app_name = "settings"

urlpatterns = [
    path("", RestaurantSettingsView.as_view(), name="restaurant-settings"),
]
