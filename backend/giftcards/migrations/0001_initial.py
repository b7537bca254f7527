import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GiftCard",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=20, unique=True)),
                ("pin", models.CharField(blank=True, max_length=128)),
                ("original_balance", models.DecimalField(decimal_places=2, max_digits=10)),
                ("current_balance", models.DecimalField(decimal_places=2, max_digits=10)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("USED", "Fully Used"), ("EXPIRED", "Expired")], default="ACTIVE", max_length=20)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("purchased_by_id", models.CharField(blank=True, max_length=64, null=True)),
                ("recipient_email", models.EmailField(blank=True, max_length=254)),
                ("recipient_name", models.CharField(blank=True, max_length=200)),
                ("message", models.TextField(blank=True)),
                ("last_used_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Gift Card",
                "verbose_name_plural": "Gift Cards",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "expires_at"], name="giftcards_g_status_3e1d7c_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("current_balance__gte", 0), ("current_balance__lte", models.F("original_balance"))),
                        name="giftcard_balance_within_bounds",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="GiftCardTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("USAGE", "Usage"), ("REFUND", "Refund")], max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=10)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("gift_card", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="giftcards.giftcard")),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="gift_card_transactions", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
