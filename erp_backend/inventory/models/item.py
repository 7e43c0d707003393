# inventory/models/item.py

"""
ITEM

`current_stock` is a cache: SUM(StockBalance.quantity) across all
warehouses. Only the stock ledger service (and the repair pass) write it.
"""

from decimal import Decimal

from django.db import models


class Item(models.Model):
    item_code = models.CharField(max_length=50, unique=True)
    item_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    unit_of_measure = models.CharField(max_length=20, default="PCS")

    standard_cost = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    selling_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    reorder_level = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0.000"))

    current_stock = models.DecimalField(
        max_digits=15,
        decimal_places=3,
        default=Decimal("0.000"),
        editable=False,
        help_text="Cached SUM of stock balances across warehouses.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["item_code"]
        indexes = [
            models.Index(fields=["is_active", "item_code"], name="inv_item_active_code_idx"),
        ]

    def __str__(self):
        return f"{self.item_code} - {self.item_name}"
