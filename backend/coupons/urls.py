from django.urls import path

from .views import ApplyCouponView, CouponDetailView, CouponListCreateView, ValidateCouponView

app_name = "coupons"

urlpatterns = [
    path("", CouponListCreateView.as_view(), name="coupon-list"),
    path("validate/", ValidateCouponView.as_view(), name="coupon-validate"),
    path("apply/", ApplyCouponView.as_view(), name="coupon-apply"),
    path("<uuid:pk>/", CouponDetailView.as_view(), name="coupon-detail"),
]
