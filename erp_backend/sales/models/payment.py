# sales/models/payment.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Payment(models.Model):
    """
    Customer receipt.

    RULES:
    - SUM(allocations.amount) == amount (within tolerance), enforced by
      sales.services.payment_service.create_payment.
    - amount is not editable after creation; delete and re-enter instead.
    """

    METHOD_CASH = "Cash"
    METHOD_BANK = "Bank Transfer"
    METHOD_CHEQUE = "Cheque"
    METHOD_CARD = "Card"
    METHOD_OTHER = "Other"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_BANK, "Bank Transfer"),
        (METHOD_CHEQUE, "Cheque"),
        (METHOD_CARD, "Card"),
        (METHOD_OTHER, "Other"),
    ]

    payment_no = models.CharField(max_length=30, unique=True)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.CharField(max_length=32, choices=METHOD_CHOICES, default=METHOD_CASH)

    reference_no = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]
        indexes = [
            models.Index(fields=["customer", "payment_date"], name="sales_pay_cust_date_idx"),
        ]

    def __str__(self):
        return f"{self.payment_no} | {self.amount}"
