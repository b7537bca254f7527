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
            name="Delivery",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("driver_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("ASSIGNED", "Assigned"), ("ACCEPTED", "Accepted"), ("IN_TRANSIT", "In Transit"), ("DELIVERED", "Delivered"), ("FAILED", "Failed")], default="PENDING", max_length=20)),
                ("pickup_address", models.JSONField(blank=True, default=dict)),
                ("delivery_address", models.JSONField(blank=True, default=dict)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, help_text="Destination latitude", max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, help_text="Destination longitude", max_digits=9, null=True)),
                ("distance", models.DecimalField(blank=True, decimal_places=2, help_text="Straight-line distance from the restaurant, in miles.", max_digits=6, null=True)),
                ("driver_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("driver_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("driver_location_updated_at", models.DateTimeField(blank=True, null=True)),
                ("estimated_pickup_time", models.DateTimeField(blank=True, null=True)),
                ("estimated_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("actual_pickup_time", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery_time", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, help_text="Dispatch notes for the driver.")),
                ("driver_notes", models.TextField(blank=True, help_text="Notes left by the driver on drop-off.")),
                ("failure_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="delivery", to="orders.order")),
            ],
            options={
                "verbose_name": "Delivery",
                "verbose_name_plural": "Deliveries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="delivery_status_idx"),
                    models.Index(fields=["driver_id", "status"], name="delivery_driver_status_idx"),
                ],
            },
        ),
    ]
