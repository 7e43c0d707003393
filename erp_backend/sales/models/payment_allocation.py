# sales/models/payment_allocation.py

from decimal import Decimal

from django.db import models


class PaymentAllocation(models.Model):
    """
    Part of one payment applied to one invoice.

    The invoice's paid_amount is always SUM(amount) over these rows.
    """

    payment = models.ForeignKey(
        "sales.Payment",
        on_delete=models.CASCADE,
        related_name="allocations",
    )
    invoice = models.ForeignKey(
        "sales.Invoice",
        on_delete=models.PROTECT,
        related_name="allocations",
    )

    amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["invoice"], name="sales_alloc_invoice_idx"),
            models.Index(fields=["payment"], name="sales_alloc_payment_idx"),
        ]

    def __str__(self):
        return f"{self.payment_id} -> {self.invoice_id} | {self.amount}"
