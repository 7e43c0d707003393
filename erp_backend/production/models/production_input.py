# production/models/production_input.py

from django.db import models


class ProductionInput(models.Model):
    production = models.ForeignKey(
        "production.Production",
        on_delete=models.CASCADE,
        related_name="inputs",
    )
    item = models.ForeignKey(
        "inventory.Item",
        on_delete=models.PROTECT,
        related_name="production_inputs",
    )
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="production_inputs",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.production_id} | {self.item_id} x {self.quantity}"
