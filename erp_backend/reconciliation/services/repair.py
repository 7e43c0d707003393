# reconciliation/services/repair.py

"""
======================================================
PATH: reconciliation/services/repair.py
======================================================
CONSISTENCY REPAIR PASS

Recomputes every cached aggregate from its source of truth:

1) customer_id values stored as text (SQLite only) -> integer
2) StockBalance.quantity  = SUM(StockMovement.quantity) per (item, warehouse)
3) StockBalance rows with no movements are deleted
4) Item.current_stock     = SUM(StockBalance.quantity)
5) Invoice paid/balance   = allocations; status re-derived
6) Customer.current_balance = SUM(open invoice balances)
7) PAYMENT ledger descriptions listing raw invoice ids are rewritten
   to invoice numbers

Rules:
- One transaction. dry_run computes the same report and rolls back.
- A step writes only when a value differs, so a second run reports zero.
- Every correction is logged (old -> new) on the "repair" channel.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from decimal import Decimal

from django.db import connection, transaction
from django.db.models import DecimalField, Exists, OuterRef, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from activity.services.activity_logger import Action, record_activity
from core.utils import _qty
from customers.models import CustomerLedgerEntry
from customers.services.customer_ledger import recalculate_all_customer_balances
from inventory.models import Item, StockBalance, StockMovement
from sales.models import Invoice, Payment
from sales.services.balances import calculate_invoice_balance, update_invoice_status

logger = logging.getLogger("repair")

PAYMENT_PREFIX = "Payment against "


@dataclass
class RepairReport:
    customer_ids_normalized: int = 0
    stock_balances_fixed: int = 0
    stock_balances_created: int = 0
    orphan_balances_removed: int = 0
    item_stock_synced: int = 0
    invoice_balances_fixed: int = 0
    invoice_statuses_changed: int = 0
    customer_balances_fixed: int = 0
    payment_descriptions_fixed: int = 0
    dry_run: bool = False

    @property
    def total_changes(self) -> int:
        return sum(
            getattr(self, f.name) for f in fields(self) if f.name != "dry_run"
        )

    def as_dict(self) -> dict:
        data = asdict(self)
        data["total_changes"] = self.total_changes
        return data


def _normalize_customer_ids() -> int:
    if connection.vendor != "sqlite":
        return 0

    changed = 0
    with connection.cursor() as cursor:
        for model in (Invoice, Payment):
            table = connection.ops.quote_name(model._meta.db_table)
            column = connection.ops.quote_name(model._meta.get_field("customer").column)
            cursor.execute(
                f"UPDATE {table} SET {column} = CAST({column} AS INTEGER) "
                f"WHERE typeof({column}) = 'text'"
            )
            if cursor.rowcount:
                logger.warning(
                    "Normalized text customer ids",
                    extra={"table": model._meta.db_table, "rows": cursor.rowcount},
                )
                changed += cursor.rowcount
    return changed


def _rebuild_stock_balances(report: RepairReport) -> None:
    existing = {(b.item_id, b.warehouse_id): b for b in StockBalance.objects.all()}
    sums = (
        StockMovement.objects.values("item_id", "warehouse_id")
        .annotate(total=Sum("quantity"))
        .order_by("item_id", "warehouse_id")
    )

    for row in sums:
        key = (row["item_id"], row["warehouse_id"])
        total = _qty(row["total"])
        balance = existing.get(key)

        if balance is None:
            StockBalance.objects.create(item_id=key[0], warehouse_id=key[1], quantity=total)
            report.stock_balances_created += 1
            logger.warning(
                "Stock balance created",
                extra={"item_id": key[0], "warehouse_id": key[1], "old": None, "new": str(total)},
            )
        elif _qty(balance.quantity) != total:
            StockBalance.objects.filter(id=balance.id).update(quantity=total, last_updated=timezone.now())
            report.stock_balances_fixed += 1
            logger.warning(
                "Stock balance corrected",
                extra={
                    "item_id": key[0],
                    "warehouse_id": key[1],
                    "old": str(balance.quantity),
                    "new": str(total),
                },
            )


def _remove_orphan_balances() -> int:
    has_movements = StockMovement.objects.filter(
        item_id=OuterRef("item_id"), warehouse_id=OuterRef("warehouse_id")
    )
    orphans = StockBalance.objects.filter(~Exists(has_movements))
    removed = 0
    for balance in orphans:
        logger.warning(
            "Orphan stock balance removed",
            extra={
                "item_id": balance.item_id,
                "warehouse_id": balance.warehouse_id,
                "old": str(balance.quantity),
            },
        )
        removed += 1
    if removed:
        orphans.delete()
    return removed


def _sync_item_stock() -> int:
    items = Item.objects.annotate(
        balance_total=Coalesce(
            Sum("stock_balances__quantity"),
            Value(Decimal("0.000")),
            output_field=DecimalField(max_digits=15, decimal_places=3),
        )
    )
    changed = 0
    for item in items:
        total = _qty(item.balance_total)
        if _qty(item.current_stock) != total:
            Item.objects.filter(id=item.id).update(current_stock=total, updated_at=timezone.now())
            logger.warning(
                "Item stock corrected",
                extra={"item_code": item.item_code, "old": str(item.current_stock), "new": str(total)},
            )
            changed += 1
    return changed


def _repair_invoices(report: RepairReport, today) -> None:
    for invoice in Invoice.objects.order_by("id"):
        calculate_invoice_balance(invoice.id)
        paid, balance = Invoice.objects.values_list("paid_amount", "balance_amount").get(id=invoice.id)
        if paid != invoice.paid_amount or balance != invoice.balance_amount:
            report.invoice_balances_fixed += 1

        if update_invoice_status(invoice.id, today=today) != invoice.status:
            report.invoice_statuses_changed += 1


def _rewrite_reference(token: str, invoice_numbers: dict) -> str:
    if not token.isdigit():
        return token
    return invoice_numbers.get(int(token)) or f"Invoice #{token}"


def _rewrite_payment_descriptions() -> int:
    entries = CustomerLedgerEntry.objects.filter(
        transaction_type=CustomerLedgerEntry.TransactionType.PAYMENT,
        description__startswith=PAYMENT_PREFIX,
    )
    invoice_numbers = None
    changed = 0

    for entry in entries:
        tokens = [t.strip() for t in entry.description[len(PAYMENT_PREFIX):].split(",")]
        if not any(t.isdigit() for t in tokens):
            continue

        if invoice_numbers is None:
            invoice_numbers = dict(Invoice.objects.values_list("id", "invoice_no"))

        description = PAYMENT_PREFIX + ", ".join(_rewrite_reference(t, invoice_numbers) for t in tokens)
        if description != entry.description:
            CustomerLedgerEntry.objects.filter(id=entry.id).update(description=description)
            logger.warning(
                "Payment description rewritten",
                extra={"entry_id": entry.id, "old": entry.description, "new": description},
            )
            changed += 1
    return changed


def run_repair_pass(*, dry_run: bool = False, user=None, today=None) -> RepairReport:
    report = RepairReport(dry_run=dry_run)
    today = today or timezone.localdate()

    with transaction.atomic():
        report.customer_ids_normalized = _normalize_customer_ids()
        _rebuild_stock_balances(report)
        report.orphan_balances_removed = _remove_orphan_balances()
        report.item_stock_synced = _sync_item_stock()
        _repair_invoices(report, today)
        report.customer_balances_fixed = recalculate_all_customer_balances()
        report.payment_descriptions_fixed = _rewrite_payment_descriptions()

        if dry_run:
            transaction.set_rollback(True)
        elif report.total_changes:
            record_activity(
                action=Action.REPAIR_RUN,
                entity_type="SYSTEM",
                entity_id="repair",
                description=f"Consistency repair corrected {report.total_changes} value(s)",
                user=user,
                metadata=report.as_dict(),
            )

    logger.info("Repair pass finished", extra=report.as_dict())
    return report


def check_drift(*, today=None) -> RepairReport:
    """Report what a repair pass would change, without writing."""
    return run_repair_pass(dry_run=True, today=today)
