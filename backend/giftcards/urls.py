from django.urls import path

from .views import (
    CheckBalanceView,
    GiftCardDetailView,
    GiftCardListCreateView,
    UseGiftCardView,
    ValidateGiftCardView,
)

app_name = "giftcards"

urlpatterns = [
    path("", GiftCardListCreateView.as_view(), name="giftcard-list"),
    path("check-balance/", CheckBalanceView.as_view(), name="giftcard-check-balance"),
    path("validate/", ValidateGiftCardView.as_view(), name="giftcard-validate"),
    path("use/", UseGiftCardView.as_view(), name="giftcard-use"),
    path("<uuid:pk>/", GiftCardDetailView.as_view(), name="giftcard-detail"),
]
