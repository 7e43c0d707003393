# sales/services/invoice_service.py

"""
======================================================
PATH: sales/services/invoice_service.py
======================================================
INVOICE SERVICES

create_invoice():
- Header + lines, one SALE movement (-qty) per line from a warehouse
  picked by the fallback policy (never fails for lack of stock).
- One INVOICE ledger debit for the total.
- Optional immediate payment (payment + one allocation + PAYMENT credit).
- Ends with invoice balance/status and customer balance recomputes.

update_invoice():
- Deleted payments are removed and every invoice they touched recomputed.
- Optional new immediate payment scoped to this invoice.
- Lines are replaced wholesale. Stock already deducted for the previous
  lines is NOT reconciled against the new lines.
- Old and new customer balances recomputed.

delete_invoice():
- Allocations removed; payments left with no allocation are deleted with
  their ledger rows.
- Each line restocked with a +qty ADJUSTMENT in the warehouse of its own
  SALE movement (paired per line, so repeated items in different
  warehouses reverse correctly); unpaired lines fall back to the
  reversal warehouse chain.
- INVOICE ledger row and the invoice removed.

Everything runs in one transaction per call.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from activity.services.activity_logger import Action, activity_logger
from core.exceptions import ERPValidationError, NotFoundError
from core.services.numbering import next_invoice_no
from core.utils import ZERO, _money, _qty, require_positive_qty, to_decimal
from customers.models import CustomerLedgerEntry
from customers.services.customer_ledger import (
    create_ledger_entry,
    delete_ledger_entries,
    get_customer,
    update_customer_balance,
)
from inventory.models import Item, StockMovement
from inventory.services.stock_ledger import record_movement
from inventory.services.warehouse_resolver import (
    resolve_reversal_warehouse,
    resolve_sale_warehouse,
)
from sales.models import Invoice, InvoiceItem, Payment, PaymentAllocation
from sales.services.balances import (
    allocated_total,
    calculate_invoice_balance,
    get_invoice,
    update_invoice_balance_and_status,
    update_invoice_status,
)
from sales.services.payment_service import get_payment, record_invoice_payment, remove_payment

logger = logging.getLogger("payments")

Status = Invoice.Status


def _clean_status(status) -> str | None:
    if not status:
        return None
    if status not in Status.values:
        raise ERPValidationError(f"Invalid status: {status!r}")
    return status


def _parse_lines(items) -> list[dict]:
    if not items:
        raise ERPValidationError("Invoice must have at least one item")

    lines = []
    for idx, row in enumerate(items, start=1):
        item_id = row.get("item_id")
        if not item_id:
            raise ERPValidationError(f"Line {idx}: item_id is required")
        if not Item.objects.filter(id=item_id).exists():
            raise NotFoundError(f"Item {item_id} not found")

        qty = require_positive_qty(row.get("quantity"), field_name=f"Line {idx} quantity")
        unit_price = _money(to_decimal(row.get("unit_price"), field_name=f"Line {idx} unit_price"))
        if unit_price < ZERO:
            raise ERPValidationError(f"Line {idx}: unit_price must not be negative")

        lines.append(
            {
                "item_id": int(item_id),
                "warehouse_id": row.get("warehouse_id") or None,
                "quantity": qty,
                "unit_price": unit_price,
                "amount": _money(qty * unit_price),
                "tax_rate": _money(row.get("tax_rate") or 0),
                "discount_type": row.get("discount_type") or "percentage",
                "discount_value": _money(row.get("discount_value") or 0),
            }
        )
    return lines


def _resolve_total(total_amount, lines) -> Decimal:
    if total_amount is None or total_amount == "":
        return _money(sum((line["amount"] for line in lines), ZERO))

    total = _money(to_decimal(total_amount, field_name="total_amount"))
    if total < ZERO:
        raise ERPValidationError("total_amount must not be negative")
    return total


def _payment_amount(payment) -> Decimal:
    if not payment:
        return ZERO
    amount = to_decimal(payment.get("amount"), field_name="payment amount", required=False)
    return _money(amount) if amount is not None else ZERO


def _initial_status(*, total: Decimal, paid: Decimal, requested: str | None) -> str:
    if paid > ZERO and paid >= total:
        return Status.PAID
    if paid > ZERO:
        return Status.PARTIALLY_PAID
    return requested or Status.UNPAID


def _refresh_balance_and_status(invoice_id, requested_status: str | None) -> str:
    """A requested status stands until money is allocated to the invoice."""
    calculate_invoice_balance(invoice_id)
    if requested_status and allocated_total(invoice_id) == ZERO:
        return requested_status
    return update_invoice_status(invoice_id)


def _insert_lines(invoice: Invoice, lines: list[dict]) -> list[InvoiceItem]:
    return InvoiceItem.objects.bulk_create(
        [
            InvoiceItem(
                invoice=invoice,
                item_id=line["item_id"],
                warehouse_id=line.get("resolved_warehouse_id") or line["warehouse_id"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                amount=line["amount"],
                tax_rate=line["tax_rate"],
                discount_type=line["discount_type"],
                discount_value=line["discount_value"],
            )
            for line in lines
        ]
    )


def _post_immediate_payment(invoice: Invoice, payment: dict, amount: Decimal, user) -> Payment:
    return record_invoice_payment(
        invoice=invoice,
        amount=amount,
        payment_date=payment.get("payment_date") or invoice.invoice_date,
        payment_method=payment.get("payment_method"),
        reference_no=payment.get("reference_no") or "",
        notes=payment.get("notes") or "",
        user=user,
    )


@transaction.atomic
def create_invoice(
    *,
    customer_id,
    items,
    invoice_no: str | None = None,
    invoice_date: date | None = None,
    due_date: date | None = None,
    status: str | None = None,
    discount_scope: str = Invoice.DiscountScope.INVOICE,
    discount_type: str = Invoice.DiscountType.PERCENTAGE,
    discount_value=ZERO,
    notes: str = "",
    terms: str = "",
    total_amount=None,
    payment: dict | None = None,
    user=None,
) -> Invoice:
    customer = get_customer(customer_id)
    lines = _parse_lines(items)
    requested_status = _clean_status(status)

    invoice_no = (invoice_no or "").strip() or next_invoice_no()
    if Invoice.objects.filter(invoice_no=invoice_no).exists():
        raise ERPValidationError(f"Invoice number {invoice_no} already exists")

    invoice_date = invoice_date or timezone.localdate()
    if due_date is None and customer.payment_terms_days:
        due_date = invoice_date + timedelta(days=customer.payment_terms_days)

    total = _resolve_total(total_amount, lines)
    paid = _payment_amount(payment)

    invoice = Invoice.objects.create(
        invoice_no=invoice_no,
        customer=customer,
        invoice_date=invoice_date,
        due_date=due_date,
        status=_initial_status(total=total, paid=paid, requested=requested_status),
        total_amount=total,
        paid_amount=paid,
        balance_amount=_money(total - paid),
        discount_scope=discount_scope or Invoice.DiscountScope.INVOICE,
        discount_type=discount_type or Invoice.DiscountType.PERCENTAGE,
        discount_value=_money(discount_value),
        notes=notes or "",
        terms=terms or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    for line in lines:
        warehouse_id = resolve_sale_warehouse(line["item_id"], line["quantity"], line["warehouse_id"])
        line["resolved_warehouse_id"] = warehouse_id
        record_movement(
            item_id=line["item_id"],
            warehouse_id=warehouse_id,
            movement_type=StockMovement.MovementType.SALE,
            quantity=-line["quantity"],
            unit_cost=line["unit_price"],
            reference_doctype="INVOICE",
            reference_docno=invoice.invoice_no,
            remarks=f"Sold via Invoice {invoice.invoice_no}",
            movement_date=invoice.invoice_date,
            user=user,
        )
    _insert_lines(invoice, lines)

    create_ledger_entry(
        customer_id=customer.id,
        transaction_type=CustomerLedgerEntry.TransactionType.INVOICE,
        reference_no=invoice.invoice_no,
        debit=total,
        description=f"Invoice {invoice.invoice_no}",
        transaction_date=invoice.invoice_date,
    )

    if paid > ZERO:
        _post_immediate_payment(invoice, payment, paid, user)

    _refresh_balance_and_status(invoice.id, requested_status)
    update_customer_balance(customer.id)

    activity_logger.log_crud(
        Action.INVOICE_CREATE,
        "INVOICE",
        invoice.invoice_no,
        user=user,
        description=f"Invoice {invoice.invoice_no} created for {customer.customer_name}",
        metadata={"total_amount": str(total), "paid": str(paid), "lines": len(lines)},
    )

    logger.info(
        "Invoice created",
        extra={
            "invoice_no": invoice.invoice_no,
            "customer_id": customer.id,
            "total": str(total),
            "paid": str(paid),
        },
    )

    invoice.refresh_from_db()
    return invoice


@transaction.atomic
def update_invoice(
    invoice_id,
    *,
    customer_id,
    items,
    invoice_no: str | None = None,
    invoice_date: date | None = None,
    due_date: date | None = None,
    status: str | None = None,
    discount_scope: str | None = None,
    discount_type: str | None = None,
    discount_value=None,
    notes: str | None = None,
    terms: str | None = None,
    total_amount=None,
    deleted_payments=(),
    payment: dict | None = None,
    user=None,
) -> Invoice:
    invoice = get_invoice(invoice_id)
    old_customer_id = invoice.customer_id
    customer = get_customer(customer_id)
    lines = _parse_lines(items)
    requested_status = _clean_status(status)

    # Ledger rows and stock movements reference the number.
    if invoice_no and invoice_no.strip() != invoice.invoice_no:
        raise ERPValidationError("invoice_no cannot be changed")

    touched_invoice_ids: set[int] = set()
    for payment_id in deleted_payments or ():
        touched_invoice_ids.update(remove_payment(get_payment(payment_id)))
    touched_invoice_ids.discard(invoice.id)

    total = _resolve_total(total_amount, lines)

    invoice.customer = customer
    invoice.invoice_date = invoice_date or invoice.invoice_date
    invoice.due_date = due_date if due_date is not None else invoice.due_date
    invoice.total_amount = total
    if discount_scope:
        invoice.discount_scope = discount_scope
    if discount_type:
        invoice.discount_type = discount_type
    if discount_value is not None:
        invoice.discount_value = _money(discount_value)
    if notes is not None:
        invoice.notes = notes
    if terms is not None:
        invoice.terms = terms
    if requested_status:
        invoice.status = requested_status
    invoice.save()

    paid = _payment_amount(payment)
    if paid > ZERO:
        _post_immediate_payment(invoice, payment, paid, user)

    InvoiceItem.objects.filter(invoice=invoice).delete()
    _insert_lines(invoice, lines)

    _refresh_balance_and_status(invoice.id, requested_status)
    for other_id in sorted(touched_invoice_ids):
        update_invoice_balance_and_status(other_id)

    if old_customer_id != customer.id:
        update_customer_balance(old_customer_id)
    update_customer_balance(customer.id)

    activity_logger.log_crud(
        Action.INVOICE_UPDATE,
        "INVOICE",
        invoice.invoice_no,
        user=user,
        description=f"Invoice {invoice.invoice_no} updated",
        metadata={
            "total_amount": str(total),
            "deleted_payments": [str(p) for p in deleted_payments or ()],
            "new_payment": str(paid),
        },
    )

    invoice.refresh_from_db()
    return invoice


def _take_sale_movement(sale_movements: list[dict], line: InvoiceItem) -> dict | None:
    """
    Pair a line with one unconsumed SALE movement of its item: the same
    quantity first, otherwise the earliest. The pair is removed from the list.
    """
    candidates = [m for m in sale_movements if m["item_id"] == line.item_id]
    if not candidates:
        return None

    wanted = -_qty(line.quantity)
    match = next((m for m in candidates if _qty(m["quantity"]) == wanted), candidates[0])
    sale_movements.remove(match)
    return match


@transaction.atomic
def delete_invoice(invoice_id, *, user=None) -> dict:
    invoice = get_invoice(invoice_id)
    invoice_no = invoice.invoice_no
    customer_id = invoice.customer_id

    removed = {
        row["payment_id"]: _money(row["total"])
        for row in PaymentAllocation.objects.filter(invoice=invoice)
        .values("payment_id")
        .annotate(total=Sum("amount"))
        .order_by()
    }
    PaymentAllocation.objects.filter(invoice=invoice).delete()

    deleted_payments = []
    for payment_id, amount in removed.items():
        payment = Payment.objects.get(id=payment_id)
        if not payment.allocations.exists():
            remove_payment(payment)
            deleted_payments.append(payment.payment_no)
            continue

        # Shared payment: keep it, shrink it to what is still allocated.
        Payment.objects.filter(id=payment_id).update(amount=_money(payment.amount - amount))
        logger.warning(
            "Shared payment reduced by deleted invoice allocation",
            extra={"payment_no": payment.payment_no, "invoice_no": invoice_no, "amount": str(amount)},
        )

    sale_movements = list(
        StockMovement.objects.filter(
            reference_docno=invoice_no, movement_type=StockMovement.MovementType.SALE
        )
        .order_by("id")
        .values("id", "item_id", "warehouse_id", "quantity")
    )

    reversed_lines = 0
    for line in invoice.items.order_by("id"):
        sale = _take_sale_movement(sale_movements, line)
        if sale is not None:
            warehouse_id = sale["warehouse_id"]
        else:
            warehouse_id = resolve_reversal_warehouse(line.item_id, invoice_no, line.warehouse_id)
        record_movement(
            item_id=line.item_id,
            warehouse_id=warehouse_id,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
            quantity=_qty(line.quantity),
            unit_cost=line.unit_price,
            reference_doctype="INVOICE_DELETE",
            reference_docno=invoice_no,
            remarks=f"Stock reversed - Invoice {invoice_no} deleted",
            movement_date=timezone.localdate(),
            user=user,
        )
        reversed_lines += 1

    invoice.items.all().delete()
    delete_ledger_entries(
        reference_no=invoice_no,
        transaction_type=CustomerLedgerEntry.TransactionType.INVOICE,
    )
    invoice.delete()

    update_customer_balance(customer_id)

    activity_logger.log_crud(
        Action.INVOICE_DELETE,
        "INVOICE",
        invoice_no,
        user=user,
        description=f"Invoice {invoice_no} deleted",
        metadata={"deleted_payments": deleted_payments, "reversed_lines": reversed_lines},
    )
    logger.info(
        "Invoice deleted",
        extra={"invoice_no": invoice_no, "deleted_payments": deleted_payments},
    )

    return {
        "invoice_no": invoice_no,
        "deleted_payments": deleted_payments,
        "reversed_lines": reversed_lines,
    }


def get_invoice_payments(invoice_id) -> list[dict]:
    get_invoice(invoice_id)

    rows = (
        PaymentAllocation.objects.filter(invoice_id=invoice_id)
        .select_related("payment")
        .order_by("-payment__payment_date", "-payment_id")
    )
    return [
        {
            "id": row.payment_id,
            "payment_no": row.payment.payment_no,
            "payment_date": row.payment.payment_date,
            "payment_method": row.payment.payment_method,
            "reference_no": row.payment.reference_no,
            "notes": row.payment.notes,
            "amount": row.amount,
        }
        for row in rows
    ]
