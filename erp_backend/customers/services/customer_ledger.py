# customers/services/customer_ledger.py

"""
======================================================
PATH: customers/services/customer_ledger.py
======================================================
CUSTOMER LEDGER SERVICES

Purpose:
- create_ledger_entry(): append one INVOICE / PAYMENT / OPENING_BALANCE row
  with its materialized running balance.
- update_customer_balance(): full recompute of Customer.current_balance
  from open invoices (never incremental).
- Customer onboarding with opening balance.
- Statement: opening balance before a date + running balance per row.

Rules:
- Ledger rows are never edited by business flows. Deleting a source
  document deletes its ledger row by reference number.
- Opening balance lives in the ledger only; current_balance covers open
  invoices.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from activity.services.activity_logger import Action, activity_logger
from core.exceptions import ERPValidationError, NotFoundError
from core.utils import ZERO, _money, to_decimal
from customers.models import Customer, CustomerLedgerEntry

logger = logging.getLogger("ledger")

# Invoice statuses that carry receivable balance.
OPEN_INVOICE_STATUSES = ("Unpaid", "Partially Paid", "Overdue")

TransactionType = CustomerLedgerEntry.TransactionType


def get_customer(customer_id) -> Customer:
    customer = Customer.objects.filter(id=customer_id).first()
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def last_running_balance(customer_id) -> Decimal:
    balance = (
        CustomerLedgerEntry.objects.filter(customer_id=customer_id)
        .order_by("-id")
        .values_list("balance", flat=True)
        .first()
    )
    return _money(balance) if balance is not None else ZERO


@transaction.atomic
def create_ledger_entry(
    *,
    customer_id,
    transaction_type: str,
    reference_no: str,
    debit=ZERO,
    credit=ZERO,
    description: str = "",
    transaction_date: date | None = None,
) -> CustomerLedgerEntry:
    if transaction_type not in TransactionType.values:
        raise ERPValidationError(f"Invalid transaction_type: {transaction_type!r}")

    dr = _money(debit)
    cr = _money(credit)
    if dr < ZERO or cr < ZERO:
        raise ERPValidationError("debit and credit must be non-negative")

    previous = last_running_balance(customer_id)
    balance = _money(previous + dr - cr)

    entry = CustomerLedgerEntry.objects.create(
        customer_id=customer_id,
        transaction_date=transaction_date or timezone.localdate(),
        transaction_type=transaction_type,
        reference_no=(reference_no or "").strip(),
        debit=dr,
        credit=cr,
        balance=balance,
        description=description or "",
    )

    logger.info(
        "Customer ledger entry created",
        extra={
            "customer_id": customer_id,
            "transaction_type": transaction_type,
            "reference_no": entry.reference_no,
            "debit": str(dr),
            "credit": str(cr),
            "balance": str(balance),
        },
    )
    return entry


def delete_ledger_entries(*, reference_no: str, transaction_type: str | None = None) -> int:
    qs = CustomerLedgerEntry.objects.filter(reference_no=reference_no)
    if transaction_type:
        qs = qs.filter(transaction_type=transaction_type)
    deleted, _ = qs.delete()

    if deleted:
        logger.info(
            "Customer ledger entries deleted",
            extra={"reference_no": reference_no, "transaction_type": transaction_type, "count": deleted},
        )
    return deleted


def compute_customer_balance(customer_id) -> Decimal:
    total = (
        Customer.objects.filter(id=customer_id)
        .aggregate(
            total=Sum(
                "invoices__balance_amount",
                filter=Q(invoices__status__in=OPEN_INVOICE_STATUSES),
            )
        )["total"]
    )
    return _money(total)


@transaction.atomic
def update_customer_balance(customer_id) -> Decimal:
    """current_balance = SUM(open invoice balance_amount). Full recompute."""
    if customer_id is None:
        return ZERO

    balance = compute_customer_balance(customer_id)
    Customer.objects.filter(id=customer_id).update(current_balance=balance, updated_at=timezone.now())
    return balance


def recalculate_all_customer_balances() -> int:
    """Recompute every customer; returns how many values changed."""
    changed = 0
    for customer_id, cached in Customer.objects.values_list("id", "current_balance"):
        fresh = compute_customer_balance(customer_id)
        if _money(cached) != fresh:
            Customer.objects.filter(id=customer_id).update(current_balance=fresh, updated_at=timezone.now())
            logger.warning(
                "Customer balance corrected",
                extra={"customer_id": customer_id, "old": str(cached), "new": str(fresh)},
            )
            changed += 1
    return changed


def record_opening_balance(customer: Customer) -> CustomerLedgerEntry | None:
    amount = _money(customer.opening_balance)
    if amount == ZERO:
        return None

    return create_ledger_entry(
        customer_id=customer.id,
        transaction_type=TransactionType.OPENING_BALANCE,
        reference_no=f"OB-{customer.customer_code}",
        debit=amount if amount > ZERO else ZERO,
        credit=abs(amount) if amount < ZERO else ZERO,
        description="Opening balance",
    )


@transaction.atomic
def create_customer(*, customer_code: str, customer_name: str, user=None, **fields) -> Customer:
    code = (customer_code or "").strip()
    name = (customer_name or "").strip()
    if not code:
        raise ERPValidationError("customer_code is required")
    if not name:
        raise ERPValidationError("customer_name is required")
    if Customer.objects.filter(customer_code=code).exists():
        raise ERPValidationError(f"Customer code {code} already exists")

    opening = _money(to_decimal(fields.pop("opening_balance", ZERO), field_name="opening_balance"))

    customer = Customer.objects.create(
        customer_code=code,
        customer_name=name,
        opening_balance=opening,
        **fields,
    )
    record_opening_balance(customer)
    update_customer_balance(customer.id)

    activity_logger.log_crud(
        Action.CUSTOMER_CREATE,
        "CUSTOMER",
        customer.customer_code,
        user=user,
        description=f"Customer {customer.customer_name} created",
        metadata={"opening_balance": str(opening)},
    )

    customer.refresh_from_db()
    return customer


def get_customer_ledger(customer_id):
    get_customer(customer_id)
    return CustomerLedgerEntry.objects.filter(customer_id=customer_id).order_by("id")


def get_customer_statement(customer_id, *, date_from: date | None = None, date_to: date | None = None) -> dict:
    """
    Statement for a date window.

    opening_balance = stored running balance of the last entry dated before
    date_from. Row balances inside the window are recomputed in date order
    so back-dated entries read correctly.
    """
    customer = get_customer(customer_id)
    entries = CustomerLedgerEntry.objects.filter(customer_id=customer.id)

    opening = ZERO
    if date_from:
        prior = (
            entries.filter(transaction_date__lt=date_from)
            .order_by("-transaction_date", "-id")
            .values_list("balance", flat=True)
            .first()
        )
        opening = _money(prior) if prior is not None else ZERO
        entries = entries.filter(transaction_date__gte=date_from)
    if date_to:
        entries = entries.filter(transaction_date__lte=date_to)

    running = opening
    total_debit = ZERO
    total_credit = ZERO
    rows = []
    for e in entries.order_by("transaction_date", "id"):
        running = _money(running + e.debit - e.credit)
        total_debit += e.debit
        total_credit += e.credit
        rows.append(
            {
                "id": e.id,
                "transaction_date": e.transaction_date,
                "transaction_type": e.transaction_type,
                "reference_no": e.reference_no,
                "description": e.description,
                "debit": e.debit,
                "credit": e.credit,
                "running_balance": running,
            }
        )

    return {
        "customer_id": customer.id,
        "customer_code": customer.customer_code,
        "customer_name": customer.customer_name,
        "date_from": date_from,
        "date_to": date_to,
        "opening_balance": opening,
        "total_debit": _money(total_debit),
        "total_credit": _money(total_credit),
        "closing_balance": running,
        "entries": rows,
    }
