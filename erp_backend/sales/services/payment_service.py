# sales/services/payment_service.py

"""
======================================================
PATH: sales/services/payment_service.py
======================================================
PAYMENT SERVICES

Purpose:
- create_payment(): one payment split across one or more invoices of the
  same customer.
- update_payment(): non-financial fields only.
- delete_payment(): remove a payment, its allocations and its ledger row.
- record_invoice_payment() / remove_payment(): shared building blocks used
  by the invoice services for immediate and deleted payments.

Rules:
- The allocation-sum gate is the one hard validation in the
  reconciliation path: SUM(allocations) must equal amount within
  ERP_ALLOCATION_TOLERANCE, otherwise nothing is written.
- Every path ends with full recomputes (invoice balance + status,
  customer balance), never increments.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from activity.services.activity_logger import Action, activity_logger
from core.exceptions import ERPValidationError, NotFoundError
from core.services.numbering import next_payment_no
from core.utils import ZERO, _money, require_positive_money
from customers.models import CustomerLedgerEntry
from customers.services.customer_ledger import (
    create_ledger_entry,
    delete_ledger_entries,
    get_customer,
    update_customer_balance,
)
from sales.models import Invoice, Payment, PaymentAllocation
from sales.services.balances import update_invoice_balance_and_status

logger = logging.getLogger("payments")

EDITABLE_PAYMENT_FIELDS = ("payment_date", "payment_method", "reference_no", "notes")


def allocation_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "ERP_ALLOCATION_TOLERANCE", "0.01")))


def get_payment(payment_id) -> Payment:
    payment = Payment.objects.filter(id=payment_id).first()
    if payment is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    return payment


def _clean_method(method) -> str:
    method = (method or Payment.METHOD_CASH).strip()
    if method not in dict(Payment.METHOD_CHOICES):
        raise ERPValidationError(f"Invalid payment_method: {method!r}")
    return method


def _parse_allocations(customer_id, invoice_allocations) -> list[tuple[Invoice, Decimal]]:
    if not invoice_allocations:
        raise ERPValidationError("At least one invoice allocation is required")

    parsed: list[tuple[Invoice, Decimal]] = []
    seen: set[int] = set()

    for row in invoice_allocations:
        invoice_id = row.get("invoice_id")
        if not invoice_id:
            raise ERPValidationError("invoice_id is required for every allocation")

        invoice = Invoice.objects.filter(id=invoice_id).first()
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        if invoice.customer_id != int(customer_id):
            raise ERPValidationError(
                f"Invoice {invoice.invoice_no} does not belong to customer {customer_id}"
            )
        if invoice.id in seen:
            raise ERPValidationError(f"Invoice {invoice.invoice_no} is allocated more than once")
        seen.add(invoice.id)

        amount = require_positive_money(row.get("amount"), field_name="allocation amount")
        parsed.append((invoice, amount))

    return parsed


@transaction.atomic
def record_invoice_payment(
    *,
    invoice: Invoice,
    amount,
    payment_date: date | None = None,
    payment_method: str | None = None,
    reference_no: str = "",
    notes: str = "",
    user=None,
) -> Payment:
    """
    Payment + one allocation to `invoice` + PAYMENT ledger credit.

    The caller recomputes invoice and customer balances afterwards.
    """
    amt = require_positive_money(amount, field_name="payment amount")

    payment = Payment.objects.create(
        payment_no=next_payment_no(),
        customer_id=invoice.customer_id,
        payment_date=payment_date or invoice.invoice_date,
        amount=amt,
        payment_method=_clean_method(payment_method),
        reference_no=(reference_no or "").strip(),
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    PaymentAllocation.objects.create(payment=payment, invoice=invoice, amount=amt)

    create_ledger_entry(
        customer_id=invoice.customer_id,
        transaction_type=CustomerLedgerEntry.TransactionType.PAYMENT,
        reference_no=payment.payment_no,
        credit=amt,
        description=f"Payment {payment.payment_no} for Invoice {invoice.invoice_no}",
        transaction_date=payment.payment_date,
    )

    logger.info(
        "Invoice payment recorded",
        extra={"payment_no": payment.payment_no, "invoice_no": invoice.invoice_no, "amount": str(amt)},
    )
    return payment


@transaction.atomic
def remove_payment(payment: Payment) -> list[int]:
    """
    Delete a payment with its allocations and PAYMENT ledger rows.

    Returns the invoice ids it was allocated to; the caller recomputes them.
    """
    invoice_ids = list(
        PaymentAllocation.objects.filter(payment=payment)
        .values_list("invoice_id", flat=True)
        .distinct()
    )

    delete_ledger_entries(
        reference_no=payment.payment_no,
        transaction_type=CustomerLedgerEntry.TransactionType.PAYMENT,
    )
    PaymentAllocation.objects.filter(payment=payment).delete()
    payment.delete()

    logger.info(
        "Payment removed",
        extra={"payment_no": payment.payment_no, "invoice_ids": invoice_ids},
    )
    return invoice_ids


@transaction.atomic
def create_payment(
    *,
    customer_id,
    amount,
    invoice_allocations,
    payment_date: date | None = None,
    payment_method: str = Payment.METHOD_CASH,
    reference_no: str = "",
    notes: str = "",
    user=None,
) -> Payment:
    customer = get_customer(customer_id)
    amt = require_positive_money(amount, field_name="amount")
    allocations = _parse_allocations(customer.id, invoice_allocations)

    allocated = _money(sum((a for _, a in allocations), ZERO))
    if abs(allocated - amt) > allocation_tolerance():
        raise ERPValidationError(
            f"Allocated total {allocated} does not match payment amount {amt}"
        )

    payment = Payment.objects.create(
        payment_no=next_payment_no(),
        customer=customer,
        payment_date=payment_date or timezone.localdate(),
        amount=amt,
        payment_method=_clean_method(payment_method),
        reference_no=(reference_no or "").strip(),
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    PaymentAllocation.objects.bulk_create(
        [PaymentAllocation(payment=payment, invoice=inv, amount=a) for inv, a in allocations]
    )
    for invoice, _ in allocations:
        update_invoice_balance_and_status(invoice.id)

    invoice_nos = ", ".join(inv.invoice_no for inv, _ in allocations)
    create_ledger_entry(
        customer_id=customer.id,
        transaction_type=CustomerLedgerEntry.TransactionType.PAYMENT,
        reference_no=payment.payment_no,
        credit=amt,
        description=f"Payment against {invoice_nos}",
        transaction_date=payment.payment_date,
    )

    update_customer_balance(customer.id)

    activity_logger.log_crud(
        Action.PAYMENT_CREATE,
        "PAYMENT",
        payment.payment_no,
        user=user,
        description=f"Payment {payment.payment_no} of {amt} against {invoice_nos}",
        metadata={"amount": str(amt), "invoices": [inv.invoice_no for inv, _ in allocations]},
    )

    logger.info(
        "Payment created",
        extra={"payment_no": payment.payment_no, "customer_id": customer.id, "amount": str(amt)},
    )
    return payment


@transaction.atomic
def update_payment(payment_id, *, user=None, **fields) -> Payment:
    payment = get_payment(payment_id)

    blocked = sorted(set(fields) - set(EDITABLE_PAYMENT_FIELDS))
    if blocked:
        raise ERPValidationError(
            f"Only {', '.join(EDITABLE_PAYMENT_FIELDS)} can be changed on a payment; got {', '.join(blocked)}"
        )

    if "payment_method" in fields:
        fields["payment_method"] = _clean_method(fields["payment_method"])
    if "reference_no" in fields:
        fields["reference_no"] = (fields["reference_no"] or "").strip()
    if "notes" in fields:
        fields["notes"] = fields["notes"] or ""
    if "payment_date" in fields and not fields["payment_date"]:
        raise ERPValidationError("payment_date is required")

    for name, value in fields.items():
        setattr(payment, name, value)
    if fields:
        payment.save(update_fields=list(fields))

    for invoice_id in payment.allocations.values_list("invoice_id", flat=True):
        update_invoice_balance_and_status(invoice_id)
    update_customer_balance(payment.customer_id)

    activity_logger.log_crud(
        Action.PAYMENT_UPDATE,
        "PAYMENT",
        payment.payment_no,
        user=user,
        description=f"Payment {payment.payment_no} updated",
        metadata={"fields": sorted(fields)},
    )
    return payment


@transaction.atomic
def delete_payment(payment_id, *, user=None) -> dict:
    payment = get_payment(payment_id)
    customer_id = payment.customer_id
    payment_no = payment.payment_no
    amount = payment.amount

    invoice_ids = remove_payment(payment)
    for invoice_id in invoice_ids:
        update_invoice_balance_and_status(invoice_id)
    update_customer_balance(customer_id)

    activity_logger.log_crud(
        Action.PAYMENT_DELETE,
        "PAYMENT",
        payment_no,
        user=user,
        description=f"Payment {payment_no} deleted",
        metadata={"amount": str(amount), "invoice_ids": invoice_ids},
    )
    return {"payment_no": payment_no, "invoice_ids": invoice_ids}
