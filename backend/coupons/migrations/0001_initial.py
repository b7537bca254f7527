import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Coupon",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("type", models.CharField(choices=[("PERCENTAGE", "Percentage"), ("FIXED", "Fixed Amount"), ("FREE_SHIPPING", "Free Delivery"), ("BUY_X_GET_Y", "Buy X Get Y")], max_length=20)),
                ("discount_value", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("max_discount_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("min_order_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("valid_from", models.DateTimeField(default=django.utils.timezone.now)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                ("usage_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("usage_limit_per_user", models.PositiveIntegerField(blank=True, null=True)),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive"), ("EXPIRED", "Expired")], default="ACTIVE", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "valid_until"], name="coupons_cou_status_5b0f1e_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("usage_limit__isnull", True), ("usage_count__lte", models.F("usage_limit")), _connector="OR"),
                        name="coupon_usage_within_limit",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="CouponUsage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("discount_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("used_at", models.DateTimeField(auto_now_add=True)),
                ("coupon", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="usages", to="coupons.coupon")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="coupon_usages", to="orders.order")),
            ],
            options={
                "ordering": ["-used_at"],
                "indexes": [models.Index(fields=["coupon", "user_id"], name="coupons_cou_coupon__8c2d4a_idx")],
            },
        ),
    ]
