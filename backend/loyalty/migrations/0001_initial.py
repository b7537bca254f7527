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
            name="LoyaltyAccount",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(max_length=64, unique=True)),
                ("points", models.PositiveIntegerField(default=0)),
                ("lifetime_points", models.PositiveIntegerField(default=0)),
                ("tier", models.CharField(choices=[("BRONZE", "Bronze"), ("SILVER", "Silver"), ("GOLD", "Gold"), ("PLATINUM", "Platinum")], default="BRONZE", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="LoyaltyTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("EARNED", "Earned"), ("REDEEMED", "Redeemed"), ("EXPIRED", "Expired"), ("ADJUSTED", "Adjusted")], max_length=10)),
                ("points", models.IntegerField()),
                ("description", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="loyalty.loyaltyaccount")),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="loyalty_transactions", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("type", "EARNED"), ("order__isnull", False)),
                        fields=("account", "order", "type"),
                        name="loyalty_earn_once_per_order",
                    )
                ],
            },
        ),
    ]
