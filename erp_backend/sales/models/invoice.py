# sales/models/invoice.py

"""
INVOICE (credit sale document)

paid_amount / balance_amount / status are DERIVED:
- paid_amount    = SUM(allocations.amount)
- balance_amount = total_amount - paid_amount
- status         = see sales.services.balances.derive_status

They are only written by the sales services and the repair pass.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Invoice(models.Model):
    class Status(models.TextChoices):
        DRAFT = "Draft", "Draft"
        UNPAID = "Unpaid", "Unpaid"
        PARTIALLY_PAID = "Partially Paid", "Partially Paid"
        PAID = "Paid", "Paid"
        OVERDUE = "Overdue", "Overdue"
        CANCELLED = "Cancelled", "Cancelled"

    class DiscountScope(models.TextChoices):
        INVOICE = "invoice", "Invoice"
        LINE = "line", "Line"

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed"

    invoice_no = models.CharField(max_length=50, unique=True)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.UNPAID)

    total_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    paid_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    balance_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    discount_scope = models.CharField(
        max_length=10, choices=DiscountScope.choices, default=DiscountScope.INVOICE
    )
    discount_type = models.CharField(
        max_length=12, choices=DiscountType.choices, default=DiscountType.PERCENTAGE
    )
    discount_value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True, default="")
    terms = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        indexes = [
            models.Index(fields=["customer", "status"], name="sales_inv_cust_status_idx"),
            models.Index(fields=["status", "due_date"], name="sales_inv_status_due_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.status in (self.Status.UNPAID, self.Status.PARTIALLY_PAID, self.Status.OVERDUE)

    def __str__(self):
        return f"{self.invoice_no} | {self.status} | {self.balance_amount}"
