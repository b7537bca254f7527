from collections import defaultdict
from typing import List, Sequence

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError

from .models import MenuItem, ModifierOption


class CatalogService:
    """
    Read-only catalog lookups used at checkout to snapshot prices. Prices
    always come from here, never from the client payload.
    """

    @staticmethod
    def get_menu_item(item_id) -> MenuItem:
        try:
            item = MenuItem.objects.select_related("category").get(pk=item_id)
        except (MenuItem.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Menu item {item_id} not found")

        if not item.is_available:
            raise BusinessRuleViolation(f"{item.name} is currently unavailable")
        return item

    @staticmethod
    def get_modifier_options(menu_item: MenuItem, option_ids: Sequence) -> List[ModifierOption]:
        """
        Resolve the selected option ids for a menu item and check them against
        the item's modifier sets (membership, availability, selection bounds).
        """
        modifier_sets = list(menu_item.modifier_sets.prefetch_related("options"))
        allowed = {
            option.pk: option
            for modifier_set in modifier_sets
            for option in modifier_set.options.all()
        }

        selected = []
        for option_id in option_ids or []:
            try:
                option = allowed[int(option_id)]
            except (KeyError, ValueError, TypeError):
                raise ValidationError(
                    f"Modifier option {option_id} is not available for {menu_item.name}"
                )
            if not option.is_available:
                raise BusinessRuleViolation(f"{option.name} is currently unavailable")
            selected.append(option)

        counts = defaultdict(int)
        for option in selected:
            counts[option.modifier_set_id] += 1

        for modifier_set in modifier_sets:
            count = counts[modifier_set.pk]
            if count < modifier_set.min_selections:
                raise ValidationError(f"{modifier_set.name} requires a selection")
            limit = modifier_set.max_selections
            if modifier_set.selection_type == modifier_set.SelectionType.SINGLE:
                limit = 1
            if limit is not None and count > limit:
                raise ValidationError(
                    f"Too many selections for {modifier_set.name} (max {limit})"
                )

        return selected
