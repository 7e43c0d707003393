# core/models.py

"""
DOCUMENT COUNTERS

One row per (prefix, year). The row is locked (select_for_update) and
incremented inside the same transaction that inserts the document, so
numbers survive restarts and never repeat within a year.
"""

from django.db import models


class DocumentCounter(models.Model):
    class Prefix(models.TextChoices):
        PURCHASE_ORDER = "PO", "Purchase Order"
        INVOICE = "INV", "Invoice"
        PAYMENT = "PAY", "Payment"
        STOCK_MOVEMENT = "STK", "Stock Movement"
        PRODUCTION = "PROD", "Production"
        PURCHASE = "PURCH", "Purchase"
        GOODS_RECEIPT = "GR", "Goods Receipt"
        SALE = "SALE", "Direct Sale"

    prefix = models.CharField(max_length=10, choices=Prefix.choices)
    year = models.PositiveIntegerField()
    last_no = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["prefix", "year"]
        constraints = [
            models.UniqueConstraint(
                fields=["prefix", "year"], name="uniq_document_counter_prefix_year"
            ),
        ]

    def __str__(self):
        return f"{self.prefix}-{self.year} @ {self.last_no}"
