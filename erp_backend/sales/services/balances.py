# sales/services/balances.py

"""
======================================================
PATH: sales/services/balances.py
======================================================
INVOICE BALANCE PRIMITIVES

Purpose:
- calculate_invoice_balance(): paid_amount = SUM(allocations),
  balance_amount = total_amount - paid_amount.
- update_invoice_status(): derive status from the stored balance.
- update_invoice_balance_and_status(): both, in that order.

Rules:
- Pure functions of current rows. Safe to call redundantly.
- Writes happen only when a value actually differs, so the repair pass
  can report a true change count.
- Status is always derived from the stored balance. A status requested
  on create/update (Draft, Cancelled, ...) only stands until the next
  derivation.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.exceptions import NotFoundError
from core.utils import ZERO, _money
from sales.models import Invoice, PaymentAllocation

logger = logging.getLogger("payments")

Status = Invoice.Status


def get_invoice(invoice_id) -> Invoice:
    invoice = Invoice.objects.filter(id=invoice_id).first()
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return invoice


def allocated_total(invoice_id) -> Decimal:
    total = PaymentAllocation.objects.filter(invoice_id=invoice_id).aggregate(total=Sum("amount"))["total"]
    return _money(total)


def derive_status(*, total: Decimal, balance: Decimal, due_date: date | None, today: date) -> str:
    """
    balance <= 0 and total > 0   -> Paid
    0 < balance < total          -> Partially Paid
    otherwise                    -> Unpaid
    Not Paid and due_date passed -> Overdue
    """
    total = _money(total)
    balance = _money(balance)

    if total > ZERO and balance <= ZERO:
        return Status.PAID

    if ZERO < balance < total:
        status = Status.PARTIALLY_PAID
    else:
        status = Status.UNPAID

    if due_date and due_date < today:
        status = Status.OVERDUE
    return status


@transaction.atomic
def calculate_invoice_balance(invoice_id) -> Decimal:
    invoice = get_invoice(invoice_id)

    paid = allocated_total(invoice.id)
    balance = _money(invoice.total_amount - paid)

    if invoice.paid_amount != paid or invoice.balance_amount != balance:
        Invoice.objects.filter(id=invoice.id).update(
            paid_amount=paid, balance_amount=balance, updated_at=timezone.now()
        )
        logger.info(
            "Invoice balance recalculated",
            extra={
                "invoice_no": invoice.invoice_no,
                "old_paid": str(invoice.paid_amount),
                "paid": str(paid),
                "balance": str(balance),
            },
        )
    return balance


@transaction.atomic
def update_invoice_status(invoice_id, *, today: date | None = None) -> str:
    invoice = get_invoice(invoice_id)
    status = derive_status(
        total=invoice.total_amount,
        balance=invoice.balance_amount,
        due_date=invoice.due_date,
        today=today or timezone.localdate(),
    )
    if status != invoice.status:
        Invoice.objects.filter(id=invoice.id).update(status=status, updated_at=timezone.now())
        logger.info(
            "Invoice status changed",
            extra={"invoice_no": invoice.invoice_no, "old": invoice.status, "new": status},
        )
    return status


def update_invoice_balance_and_status(invoice_id, *, today: date | None = None) -> str:
    calculate_invoice_balance(invoice_id)
    return update_invoice_status(invoice_id, today=today)
