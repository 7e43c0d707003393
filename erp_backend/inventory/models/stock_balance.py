# inventory/models/stock_balance.py

"""
STOCK BALANCE (CACHE)

Invariant after every committed transaction:
    quantity == SUM(StockMovement.quantity) for (item, warehouse)

A row only exists for pairs that have movements; the repair pass deletes
orphans. Negative quantities are allowed (invoice path may oversell).
"""

from decimal import Decimal

from django.db import models


class StockBalance(models.Model):
    item = models.ForeignKey(
        "inventory.Item", on_delete=models.CASCADE, related_name="stock_balances"
    )
    warehouse = models.ForeignKey(
        "inventory.Warehouse", on_delete=models.CASCADE, related_name="stock_balances"
    )

    quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0.000"))
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["item_id", "warehouse_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "warehouse"], name="uniq_stock_balance_item_warehouse"
            ),
        ]

    def __str__(self):
        return f"{self.item_id}@{self.warehouse_id}: {self.quantity}"
