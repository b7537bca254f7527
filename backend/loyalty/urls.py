from django.urls import path

from .views import LoyaltyAccountView, LoyaltyTransactionListView, RedeemPreviewView

app_name = "loyalty"

urlpatterns = [
    path("account/", LoyaltyAccountView.as_view(), name="loyalty-account"),
    path("transactions/", LoyaltyTransactionListView.as_view(), name="loyalty-transactions"),
    path("redeem/preview/", RedeemPreviewView.as_view(), name="loyalty-redeem-preview"),
]
