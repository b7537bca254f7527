from django.urls import path

from .views import (
    ConfirmPaymentView,
    PaymentDetailView,
    ProcessPaymentView,
    RefundPaymentView,
    StripeWebhookView,
)

app_name = "payments"

urlpatterns = [
    path("process/", ProcessPaymentView.as_view(), name="payment-process"),
    path("confirm/", ConfirmPaymentView.as_view(), name="payment-confirm"),
    path("webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
    path("<uuid:pk>/", PaymentDetailView.as_view(), name="payment-detail"),
    path("<uuid:pk>/refund/", RefundPaymentView.as_view(), name="payment-refund"),
]
