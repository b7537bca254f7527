"""
Catalog Service Tests

Tests for the menu lookups used to price a cart:
- Menu item lookup and availability
- Modifier option membership and availability
- Selection bounds per modifier set
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from menu.models import ModifierOption, ModifierSet
from menu.services import CatalogService


@pytest.mark.django_db
class TestGetMenuItem:
    def test_available_item(self, burger):
        assert CatalogService.get_menu_item(burger.id) == burger

    def test_unknown_item(self, db):
        with pytest.raises(NotFoundError, match="Menu item 999 not found"):
            CatalogService.get_menu_item(999)

    def test_garbage_id(self, db):
        with pytest.raises(NotFoundError):
            CatalogService.get_menu_item("abc")

    def test_unavailable_item(self, burger):
        burger.is_available = False
        burger.save()

        with pytest.raises(BusinessRuleViolation, match="Classic Burger is currently unavailable"):
            CatalogService.get_menu_item(burger.id)


@pytest.mark.django_db
class TestModifierOptions:
    def test_no_selection(self, burger, cheese_set):
        assert CatalogService.get_modifier_options(burger, []) == []

    def test_valid_selection(self, burger, cheddar):
        assert CatalogService.get_modifier_options(burger, [str(cheddar.id)]) == [cheddar]

    def test_option_from_another_item(self, burger, fries, cheddar):
        with pytest.raises(ValidationError, match="not available for Fries"):
            CatalogService.get_modifier_options(fries, [cheddar.id])

    def test_unavailable_option(self, burger, cheddar):
        cheddar.is_available = False
        cheddar.save()

        with pytest.raises(BusinessRuleViolation, match="Cheddar is currently unavailable"):
            CatalogService.get_modifier_options(burger, [cheddar.id])

    def test_max_selections(self, burger, cheese_set, cheddar):
        swiss = ModifierOption.objects.create(modifier_set=cheese_set, name="Swiss", price_delta=Decimal("1.00"))
        brie = ModifierOption.objects.create(modifier_set=cheese_set, name="Brie", price_delta=Decimal("2.00"))

        with pytest.raises(ValidationError, match=r"max 2"):
            CatalogService.get_modifier_options(burger, [cheddar.id, swiss.id, brie.id])

    def test_single_choice_allows_one(self, burger):
        size = ModifierSet.objects.create(name="Size", internal_name="burger-size", min_selections=1)
        burger.modifier_sets.add(size)
        small = ModifierOption.objects.create(modifier_set=size, name="Small")
        large = ModifierOption.objects.create(modifier_set=size, name="Large", price_delta=Decimal("2.00"))

        assert CatalogService.get_modifier_options(burger, [large.id]) == [large]
        with pytest.raises(ValidationError, match="max 1"):
            CatalogService.get_modifier_options(burger, [small.id, large.id])

    def test_required_set(self, burger):
        size = ModifierSet.objects.create(name="Size", internal_name="burger-size", min_selections=1)
        burger.modifier_sets.add(size)

        with pytest.raises(ValidationError, match="Size requires a selection"):
            CatalogService.get_modifier_options(burger, [])
