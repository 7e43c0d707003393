# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Sale(models.Model):
    """
    Direct (cash) sale of one item from one warehouse. No invoice, no
    customer ledger entry; only a SALE stock movement.
    """

    sale_no = models.CharField(max_length=30, unique=True)

    item = models.ForeignKey(
        "inventory.Item",
        on_delete=models.PROTECT,
        related_name="direct_sales",
    )
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="direct_sales",
    )

    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_price = models.DecimalField(max_digits=15, decimal_places=2)
    total_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    customer_name = models.CharField(max_length=255, blank=True, default="")
    sale_date = models.DateField(default=timezone.localdate)
    invoice_no = models.CharField(max_length=50, blank=True, default="")
    remarks = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="direct_sales",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sale_date", "-id"]

    def __str__(self):
        return f"{self.sale_no} | {self.item_id} x {self.quantity}"
