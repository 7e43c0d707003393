# production/models/production.py

"""
PRODUCTION RUN

Consumes input items from raw_materials_warehouse and produces
output_quantity of output_item into warehouse (finished goods).
Stock effects are PRODUCTION movements referencing production_no.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Production(models.Model):
    production_no = models.CharField(max_length=30, unique=True)

    output_item = models.ForeignKey(
        "inventory.Item",
        on_delete=models.PROTECT,
        related_name="productions",
    )
    output_quantity = models.DecimalField(max_digits=15, decimal_places=3)

    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="finished_goods_productions",
    )
    raw_materials_warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="raw_material_productions",
    )

    production_date = models.DateField(default=timezone.localdate)
    remarks = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="productions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-production_date", "-created_at", "-id"]

    def __str__(self):
        return f"{self.production_no} | {self.output_item_id} x {self.output_quantity}"
