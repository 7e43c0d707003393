# sales/models/invoice_item.py

from decimal import Decimal

from django.db import models


class InvoiceItem(models.Model):
    """
    One invoice line. amount = quantity * unit_price; tax and discount
    settings are stored for reporting and never baked into amount.
    """

    invoice = models.ForeignKey(
        "sales.Invoice",
        on_delete=models.CASCADE,
        related_name="items",
    )
    item = models.ForeignKey(
        "inventory.Item",
        on_delete=models.PROTECT,
        related_name="invoice_lines",
    )
    # Warehouse the line's stock was deducted from (resolved at creation).
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoice_lines",
    )

    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_price = models.DecimalField(max_digits=15, decimal_places=2)
    amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    tax_rate = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    discount_type = models.CharField(max_length=12, default="percentage")
    discount_value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.invoice_id} | {self.item_id} x {self.quantity}"
