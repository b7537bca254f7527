from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin view for the Payment model. Payments are an audit trail, so
    nothing here can be edited or deleted.
    """

    list_display = (
        "id",
        "order",
        "amount",
        "payment_method",
        "status",
        "refunded_amount",
        "created_at",
    )
    list_filter = ("status", "payment_method", "created_at")
    search_fields = ("id", "order__order_number", "payment_intent_id", "refund_id")
    readonly_fields = [field.name for field in Payment._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
