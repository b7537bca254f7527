from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.Model):
    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the menu category.")
    )
    description = models.TextField(
        blank=True, help_text=_("Description of the category.")
    )
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class ModifierSet(models.Model):
    class SelectionType(models.TextChoices):
        SINGLE = "SINGLE", _("Single Choice")
        MULTIPLE = "MULTIPLE", _("Multiple Choices")

    name = models.CharField(
        max_length=100, help_text=_("Customer-facing name, e.g., 'Choose your size'")
    )
    internal_name = models.CharField(
        max_length=100,
        unique=True,
        help_text=_("Internal name for easy reference, e.g., 'drink-size'"),
    )
    selection_type = models.CharField(
        max_length=10, choices=SelectionType.choices, default=SelectionType.SINGLE
    )
    min_selections = models.PositiveIntegerField(
        default=0, help_text=_("Minimum required selections (0 for optional)")
    )
    max_selections = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Maximum allowed selections (null for unlimited)"),
    )

    def __str__(self):
        return self.name


class ModifierOption(models.Model):
    modifier_set = models.ForeignKey(
        ModifierSet, on_delete=models.CASCADE, related_name="options"
    )
    name = models.CharField(max_length=100)
    price_delta = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("The amount added to the item price when this option is chosen."),
    )
    display_order = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ["display_order", "name"]
        unique_together = ("modifier_set", "name")

    def __str__(self):
        return f"{self.modifier_set.name} - {self.name}"


class MenuItem(models.Model):
    name = models.CharField(max_length=200, help_text=_("Name of the menu item."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("The selling price of the item."),
    )
    category = models.ForeignKey(
        Category,
        related_name="items",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    modifier_sets = models.ManyToManyField(
        ModifierSet, related_name="menu_items", blank=True
    )
    is_available = models.BooleanField(
        default=True,
        help_text=_("Unavailable items cannot be ordered."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category__order", "name"]

    def __str__(self):
        return self.name
