# customers/models/customer.py

"""
CUSTOMER

`current_balance` is a cache:
    SUM(invoice.balance_amount) over invoices in an open status
    (Unpaid, Partially Paid, Overdue).
It is always fully recomputed, never incremented.

`opening_balance` is carried in the ledger as an OPENING_BALANCE entry.
"""

from decimal import Decimal

from django.db import models


class Customer(models.Model):
    customer_code = models.CharField(max_length=50, unique=True)
    customer_name = models.CharField(max_length=255)

    contact_person = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")

    credit_limit = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    opening_balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    current_balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
        help_text="Cached SUM of open invoice balances.",
    )
    payment_terms_days = models.PositiveIntegerField(default=30)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["customer_code"]

    def __str__(self):
        return f"{self.customer_code} - {self.customer_name}"

    @property
    def available_credit(self) -> Decimal:
        if not self.credit_limit:
            return Decimal("0.00")
        return self.credit_limit - self.current_balance
