# inventory/models/stock_movement.py

"""
STOCK LEDGER ENTRY

Immutable inventory fact.

GUARANTEES:
- Append-only (no updates, no deletes)
- Sign of quantity encodes direction (+ in, - out)
- Reversal of a source document is a new ADJUSTMENT row, never a delete
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "PURCHASE", "Purchase"
        SALE = "SALE", "Sale"
        PRODUCTION = "PRODUCTION", "Production"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"

    movement_no = models.CharField(max_length=30, unique=True)

    item = models.ForeignKey(
        "inventory.Item", on_delete=models.PROTECT, related_name="stock_movements"
    )
    warehouse = models.ForeignKey(
        "inventory.Warehouse", on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    reference_doctype = models.CharField(max_length=30, blank=True, default="")
    reference_docno = models.CharField(max_length=50, blank=True, default="")
    remarks = models.TextField(blank=True, default="")

    movement_date = models.DateField(default=timezone.localdate)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-movement_date", "-created_at", "-id"]
        indexes = [
            models.Index(fields=["item", "warehouse"], name="inv_mov_item_wh_idx"),
            models.Index(fields=["reference_docno", "item"], name="inv_mov_ref_item_idx"),
            models.Index(fields=["movement_type", "movement_date"], name="inv_mov_type_date_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockMovement records are immutable and cannot be deleted")

    @property
    def total_cost(self) -> Decimal:
        unit_cost = self.unit_cost if self.unit_cost is not None else Decimal("0.00")
        return unit_cost * abs(self.quantity or Decimal("0"))

    def __str__(self):
        return f"{self.movement_no} | {self.movement_type} | {self.quantity}"
