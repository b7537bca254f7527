from core_backend.base.filters import BaseFilterSet, FlexibleDateTimeFilter
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Filters for the order list. ``placed_after``/``placed_before`` accept
    either a date or a full datetime.
    """

    placed_after = FlexibleDateTimeFilter(field_name="placed_at", lookup_expr="gte")
    placed_before = FlexibleDateTimeFilter(field_name="placed_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = {
            "status": ["exact", "in"],
            "order_type": ["exact"],
            "payment_status": ["exact"],
            "order_number": ["exact"],
            "user_id": ["exact"],
            "placed_at": ["gte", "lte"],
        }
