# reports/services/reports.py

"""
======================================================
PATH: reports/services/reports.py
======================================================
READ-ONLY REPORTS

- ar_aging(): open invoice balances bucketed by days past due
- stock_valuation(): current_stock x standard_cost per item
- low_stock(): active items at or below their reorder level
- days_sales_outstanding(): AR / credit sales in window x days

Rules:
- Reads cached aggregates only (balance_amount, current_balance,
  current_stock). Nothing here writes; run the repair pass first if the
  caches are suspect.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.db.models import F, Sum
from django.utils import timezone

from core.utils import ZERO, _money, _qty
from customers.models import Customer
from customers.services.customer_ledger import OPEN_INVOICE_STATUSES
from inventory.models import Item
from sales.models import Invoice

AGING_BUCKETS = (
    ("current", None, 0),
    ("1_30", 1, 30),
    ("31_60", 31, 60),
    ("61_90", 61, 90),
    ("over_90", 91, None),
)


def _bucket_for(days_past_due: int) -> str:
    for name, low, high in AGING_BUCKETS:
        if (low is None or days_past_due >= low) and (high is None or days_past_due <= high):
            return name
    return AGING_BUCKETS[-1][0]


def _empty_buckets() -> dict:
    return {name: ZERO for name, _, _ in AGING_BUCKETS}


def ar_aging(as_of: date | None = None) -> dict:
    as_of = as_of or timezone.localdate()
    invoices = (
        Invoice.objects.filter(status__in=OPEN_INVOICE_STATUSES, balance_amount__gt=ZERO)
        .select_related("customer")
        .order_by("customer__customer_code", "due_date", "id")
    )

    totals = _empty_buckets()
    by_customer: dict[int, dict] = {}

    for inv in invoices:
        days = (as_of - inv.due_date).days if inv.due_date else 0
        bucket = _bucket_for(days)

        row = by_customer.get(inv.customer_id)
        if row is None:
            row = by_customer[inv.customer_id] = {
                "customer_id": inv.customer_id,
                "customer_code": inv.customer.customer_code,
                "customer_name": inv.customer.customer_name,
                "buckets": _empty_buckets(),
                "total": ZERO,
            }

        row["buckets"][bucket] = _money(row["buckets"][bucket] + inv.balance_amount)
        row["total"] = _money(row["total"] + inv.balance_amount)
        totals[bucket] = _money(totals[bucket] + inv.balance_amount)

    return {
        "as_of": as_of,
        "buckets": totals,
        "total": _money(sum(totals.values(), ZERO)),
        "customers": list(by_customer.values()),
    }


def stock_valuation(*, include_inactive: bool = False) -> dict:
    items = Item.objects.all() if include_inactive else Item.objects.filter(is_active=True)

    rows = []
    total = ZERO
    for item in items.order_by("item_code"):
        value = _money(item.current_stock * item.standard_cost)
        total += value
        rows.append(
            {
                "item_id": item.id,
                "item_code": item.item_code,
                "item_name": item.item_name,
                "current_stock": _qty(item.current_stock),
                "standard_cost": item.standard_cost,
                "stock_value": value,
            }
        )
    return {"total_value": _money(total), "items": rows}


def low_stock() -> list[dict]:
    items = (
        Item.objects.filter(is_active=True, reorder_level__gt=0, current_stock__lte=F("reorder_level"))
        .order_by("item_code")
    )
    return [
        {
            "item_id": item.id,
            "item_code": item.item_code,
            "item_name": item.item_name,
            "current_stock": _qty(item.current_stock),
            "reorder_level": _qty(item.reorder_level),
            "shortfall": _qty(item.reorder_level - item.current_stock),
        }
        for item in items
    ]


def days_sales_outstanding(*, days: int = 90, as_of: date | None = None) -> dict:
    """DSO = receivables / credit sales in the trailing window x days."""
    as_of = as_of or timezone.localdate()
    window_start = as_of - timedelta(days=days - 1)

    receivables = _money(Customer.objects.aggregate(total=Sum("current_balance"))["total"])
    credit_sales = _money(
        Invoice.objects.filter(invoice_date__gte=window_start, invoice_date__lte=as_of)
        .exclude(status__in=(Invoice.Status.DRAFT, Invoice.Status.CANCELLED))
        .aggregate(total=Sum("total_amount"))["total"]
    )

    dso = None
    if credit_sales > ZERO:
        dso = _money(receivables / credit_sales * Decimal(days))

    return {
        "as_of": as_of,
        "days": days,
        "receivables": receivables,
        "credit_sales": credit_sales,
        "dso": dso,
    }
