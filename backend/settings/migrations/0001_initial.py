from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RestaurantSettings",
            fields=[
                ("id", models.CharField(default="default", editable=False, max_length=32, primary_key=True, serialize=False)),
                ("name", models.CharField(default="Restaurant", max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("address", models.JSONField(blank=True, default=dict)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("tax_rate", models.DecimalField(decimal_places=4, default=Decimal("0.0825"), max_digits=6)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("3.99"), max_digits=10)),
                ("min_order_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("enable_loyalty_points", models.BooleanField(default=True)),
                ("loyalty_points_per_dollar", models.DecimalField(decimal_places=2, default=Decimal("0.50"), max_digits=6)),
                ("loyalty_points_for_free", models.PositiveIntegerField(default=100)),
                ("enable_email_notifications", models.BooleanField(default=True)),
                ("enable_sms_notifications", models.BooleanField(default=False)),
                ("auto_accept_orders", models.BooleanField(default=False)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("delivery_radius_miles", models.DecimalField(decimal_places=2, default=Decimal("5.00"), max_digits=6)),
                ("average_prep_minutes", models.PositiveIntegerField(default=20)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Restaurant Settings",
                "verbose_name_plural": "Restaurant Settings",
            },
        ),
    ]
