# customers/models/ledger_entry.py

"""
CUSTOMER LEDGER ENTRY

One row per financial event. `balance` is a materialized running total
written at insert time:
    balance = previous entry (same customer, highest id).balance + debit - credit

Back-dated inserts do NOT recompute later rows. Statements that need
date-ordered running totals recompute them at read time.
"""

from decimal import Decimal

from django.db import models
from django.utils import timezone


class CustomerLedgerEntry(models.Model):
    class TransactionType(models.TextChoices):
        INVOICE = "INVOICE", "Invoice"
        PAYMENT = "PAYMENT", "Payment"
        OPENING_BALANCE = "OPENING_BALANCE", "Opening Balance"

    customer = models.ForeignKey(
        "customers.Customer", on_delete=models.PROTECT, related_name="ledger_entries"
    )

    transaction_date = models.DateField(default=timezone.localdate)
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    reference_no = models.CharField(max_length=50, blank=True, default="")

    debit = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["customer_id", "id"]
        indexes = [
            models.Index(fields=["customer", "transaction_date"], name="cust_ledger_cust_date_idx"),
            models.Index(fields=["reference_no"], name="cust_ledger_ref_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(debit__gte=0) & models.Q(credit__gte=0),
                name="cust_ledger_debit_credit_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.reference_no} ({self.debit}/{self.credit})"
