import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                ("order", models.IntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Category",
                "verbose_name_plural": "Categories",
                "ordering": ["order", "name"],
            },
        ),
        migrations.CreateModel(
            name="ModifierSet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("internal_name", models.CharField(max_length=100, unique=True)),
                ("selection_type", models.CharField(choices=[("SINGLE", "Single Choice"), ("MULTIPLE", "Multiple Choices")], default="SINGLE", max_length=10)),
                ("min_selections", models.PositiveIntegerField(default=0)),
                ("max_selections", models.PositiveIntegerField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name="ModifierOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("price_delta", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_available", models.BooleanField(default=True)),
                ("modifier_set", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="options", to="menu.modifierset")),
            ],
            options={
                "ordering": ["display_order", "name"],
                "unique_together": {("modifier_set", "name")},
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("is_available", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="items", to="menu.category")),
                ("modifier_sets", models.ManyToManyField(blank=True, related_name="menu_items", to="menu.modifierset")),
            ],
            options={
                "ordering": ["category__order", "name"],
            },
        ),
    ]
