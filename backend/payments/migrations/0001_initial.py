import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("status", models.CharField(choices=[("PROCESSING", "Processing"), ("COMPLETED", "Completed"), ("FAILED", "Failed"), ("REFUNDED", "Refunded")], default="PROCESSING", help_text="The current status of the payment.", max_length=20)),
                ("payment_method", models.CharField(choices=[("CASH", "Cash"), ("CARD", "Card"), ("PAYPAL", "PayPal"), ("APPLE_PAY", "Apple Pay"), ("GOOGLE_PAY", "Google Pay"), ("GIFT_CARD", "Gift Card")], max_length=20)),
                ("payment_intent_id", models.CharField(blank=True, help_text="Stripe Payment Intent ID", max_length=255, null=True, unique=True)),
                ("idempotency_key", models.CharField(blank=True, help_text="Key sent to the gateway so a retried create never charges twice.", max_length=255)),
                ("customer_id", models.CharField(blank=True, help_text="Stripe Customer ID", max_length=255)),
                ("refund_id", models.CharField(blank=True, max_length=255, null=True)),
                ("refunded_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="The amount of this payment that has been refunded.", max_digits=10)),
                ("failure_reason", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="orders.order")),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="payment_status_idx"),
                    models.Index(fields=["order", "status"], name="payment_order_status_idx"),
                    models.Index(fields=["created_at"], name="payment_created_at_idx"),
                ],
            },
        ),
    ]
