import django_filters

from core_backend.base.filters import BaseFilterSet
from .models import Delivery


class DeliveryFilter(BaseFilterSet):
    order_id = django_filters.UUIDFilter(field_name="order_id")

    class Meta:
        model = Delivery
        fields = {
            "status": ["exact", "in"],
            "driver_id": ["exact"],
            "created_at": ["gte", "lte"],
        }
