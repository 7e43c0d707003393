# inventory/filters.py

import django_filters

from inventory.models import StockMovement


class StockMovementFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="movement_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="movement_date", lookup_expr="lte")

    class Meta:
        model = StockMovement
        fields = ["item", "warehouse", "movement_type", "reference_doctype", "reference_docno"]
