import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("menu", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(max_length=32, unique=True)),
                ("order_type", models.CharField(choices=[("DELIVERY", "Delivery"), ("PICKUP", "Pickup")], max_length=10)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("CONFIRMED", "Confirmed"), ("PREPARING", "Preparing"), ("READY", "Ready"), ("OUT_FOR_DELIVERY", "Out for Delivery"), ("DELIVERED", "Delivered"), ("CANCELLED", "Cancelled")], default="PENDING", max_length=20)),
                ("payment_status", models.CharField(choices=[("UNPAID", "Unpaid"), ("PAID", "Paid"), ("REFUNDED", "Refunded")], default="UNPAID", max_length=10)),
                ("user_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("customer_name", models.CharField(blank=True, max_length=200)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                ("customer_phone", models.CharField(blank=True, max_length=32)),
                ("delivery_address", models.JSONField(blank=True, null=True)),
                ("delivery_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("delivery_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("delivery_instructions", models.TextField(blank=True)),
                ("special_instructions", models.TextField(blank=True)),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("tax", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("tip", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("coupon_code", models.CharField(blank=True, max_length=50)),
                ("coupon_discount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("loyalty_points_redeemed", models.PositiveIntegerField(default=0)),
                ("loyalty_discount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("gift_card_code", models.CharField(blank=True, max_length=20)),
                ("gift_card_amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("cancellation_reason", models.TextField(blank=True)),
                ("placed_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("preparing_at", models.DateTimeField(blank=True, null=True)),
                ("ready_at", models.DateTimeField(blank=True, null=True)),
                ("out_for_delivery_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("estimated_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-placed_at"],
                "indexes": [
                    models.Index(fields=["status", "placed_at"], name="order_status_placed_idx"),
                    models.Index(fields=["user_id", "status"], name="order_user_status_idx"),
                    models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("special_instructions", models.TextField(blank=True)),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=10)),
                ("menu_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_items", to="menu.menuitem")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderItemModifier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("modifier_set_name", models.CharField(max_length=100)),
                ("option_name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("modifier_option", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="menu.modifieroption")),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modifiers", to="orders.orderitem")),
            ],
        ),
    ]
