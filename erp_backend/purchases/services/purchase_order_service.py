# purchases/services/purchase_order_service.py

"""
======================================================
PATH: purchases/services/purchase_order_service.py
======================================================
PURCHASE ORDERS AND GOODS RECEIPTS

create_purchase_order():
- PO-{year}-{seq}; status Draft (default) or Submitted.
- At least one line; quantity > 0, unit_price >= 0.
- No stock effect.

update_purchase_order_status():
- Draft -> Submitted | Cancelled
- Submitted -> Partially Received | Cancelled
- Partially Received -> Completed | Cancelled
- Completed and Cancelled are final.

delete_purchase_order():
- Draft only.

record_goods_receipt():
- PO must not be Draft or Cancelled.
- Every line is checked against its pending quantity
  (ordered - received) before anything is written.
- GR-{year}-{seq}; per line: received_quantity += qty and one PURCHASE
  movement at the PO unit price, reference GOODS_RECEIPT / receipt_no.
- PO status is recomputed from the lines afterwards.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from activity.services.activity_logger import Action, record_activity
from core.exceptions import ERPValidationError, NotFoundError
from core.models import DocumentCounter
from core.services.numbering import generate_document_no
from core.utils import ZERO, _money, _qty, require_positive_qty, to_decimal
from inventory.models import StockMovement
from inventory.services.stock_ledger import get_item, get_warehouse, record_movement
from purchases.models import GoodsReceipt, GoodsReceiptItem, PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger("stock")

Status = PurchaseOrder.Status

STATUS_TRANSITIONS = {
    Status.DRAFT: {Status.SUBMITTED, Status.CANCELLED},
    Status.SUBMITTED: {Status.PARTIALLY_RECEIVED, Status.CANCELLED},
    Status.PARTIALLY_RECEIVED: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}


def get_purchase_order(purchase_order_id, *, lock: bool = False) -> PurchaseOrder:
    qs = PurchaseOrder.objects.select_for_update() if lock else PurchaseOrder.objects
    po = qs.filter(id=purchase_order_id).first()
    if po is None:
        raise NotFoundError(f"Purchase order {purchase_order_id} not found")
    return po


def derive_receipt_status(purchase_order_id) -> str:
    """Completed when every line is fully received, Partially Received when any has stock in."""
    lines = list(
        PurchaseOrderItem.objects.filter(purchase_order_id=purchase_order_id).values_list(
            "quantity", "received_quantity"
        )
    )
    if lines and all(received >= ordered for ordered, received in lines):
        return Status.COMPLETED
    if any(received > 0 for _, received in lines):
        return Status.PARTIALLY_RECEIVED
    return Status.SUBMITTED


@transaction.atomic
def create_purchase_order(
    *,
    items,
    supplier_name: str = "",
    po_date: date | None = None,
    expected_delivery_date: date | None = None,
    status: str = Status.DRAFT,
    warehouse_id=None,
    notes: str = "",
    user=None,
) -> PurchaseOrder:
    if not items:
        raise ERPValidationError("At least one item is required")
    if status not in (Status.DRAFT, Status.SUBMITTED):
        raise ERPValidationError("A purchase order starts as Draft or Submitted")

    warehouse = get_warehouse(warehouse_id) if warehouse_id else None
    po_no = generate_document_no(DocumentCounter.Prefix.PURCHASE_ORDER)

    po = PurchaseOrder.objects.create(
        po_no=po_no,
        supplier_name=(supplier_name or "").strip(),
        po_date=po_date or timezone.localdate(),
        expected_delivery_date=expected_delivery_date,
        status=status,
        warehouse=warehouse,
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    total = ZERO
    for idx, row in enumerate(items, start=1):
        item = get_item(row.get("item_id"))
        qty = require_positive_qty(row.get("quantity"), field_name=f"Line {idx} quantity")
        price = _money(to_decimal(row.get("unit_price", 0), field_name=f"Line {idx} unit_price"))
        if price < ZERO:
            raise ERPValidationError(f"Line {idx} unit_price must not be negative")

        amount = _money(qty * price)
        PurchaseOrderItem.objects.create(
            purchase_order=po, item=item, quantity=qty, unit_price=price, amount=amount
        )
        total += amount

    po.total_amount = _money(total)
    po.save(update_fields=["total_amount", "updated_at"])

    record_activity(
        action=Action.PURCHASE_ORDER_CREATE,
        entity_type="PURCHASE_ORDER",
        entity_id=po.id,
        description=f"Created purchase order {po_no} ({status}): {len(items)} line(s)",
        user=user,
        metadata={"total_amount": str(po.total_amount)},
    )
    logger.info("Purchase order created", extra={"po_no": po_no, "status": status})
    return po


@transaction.atomic
def update_purchase_order_status(purchase_order_id, status: str, *, user=None) -> PurchaseOrder:
    po = get_purchase_order(purchase_order_id, lock=True)
    previous = po.status

    if status not in STATUS_TRANSITIONS.get(previous, set()):
        raise ERPValidationError(f"Cannot transition from {previous} to {status}")

    po.status = status
    po.save(update_fields=["status", "updated_at"])

    record_activity(
        action=Action.PURCHASE_ORDER_UPDATE,
        entity_type="PURCHASE_ORDER",
        entity_id=po.id,
        description=f"Changed PO {po.po_no} status from {previous} to {status}",
        user=user,
    )
    return po


@transaction.atomic
def delete_purchase_order(purchase_order_id, *, user=None) -> str:
    po = get_purchase_order(purchase_order_id, lock=True)
    if po.status != Status.DRAFT:
        raise ERPValidationError("Only Draft purchase orders can be deleted")

    po_no = po.po_no
    po.delete()

    record_activity(
        action=Action.PURCHASE_ORDER_DELETE,
        entity_type="PURCHASE_ORDER",
        entity_id=purchase_order_id,
        description=f"Deleted PO {po_no}",
        user=user,
    )
    return po_no


@transaction.atomic
def record_goods_receipt(
    *,
    purchase_order_id,
    warehouse_id,
    items,
    receipt_date: date | None = None,
    remarks: str = "",
    user=None,
) -> GoodsReceipt:
    if not items:
        raise ERPValidationError("At least one item must be received")

    po = get_purchase_order(purchase_order_id, lock=True)
    if po.status in (Status.DRAFT, Status.CANCELLED):
        raise ERPValidationError("Cannot receive items for Draft or Cancelled purchase orders")

    warehouse = get_warehouse(warehouse_id)
    po_lines = {
        line.id: line
        for line in PurchaseOrderItem.objects.select_for_update().filter(purchase_order=po)
    }

    # all lines are checked before the first write
    receiving: dict[int, Decimal] = {}
    for idx, row in enumerate(items, start=1):
        line = po_lines.get(row.get("po_item_id"))
        if line is None:
            raise NotFoundError(f"Line {idx}: purchase order item {row.get('po_item_id')} not found on {po.po_no}")
        qty = require_positive_qty(row.get("received_quantity"), field_name=f"Line {idx} received_quantity")
        receiving[line.id] = receiving.get(line.id, _qty(0)) + qty
        if receiving[line.id] > line.pending_quantity:
            raise ERPValidationError(
                f"Line {idx}: cannot receive more than pending quantity ({line.pending_quantity})"
            )

    receipt_no = generate_document_no(DocumentCounter.Prefix.GOODS_RECEIPT)
    receipt_date = receipt_date or timezone.localdate()

    receipt = GoodsReceipt.objects.create(
        receipt_no=receipt_no,
        purchase_order=po,
        warehouse=warehouse,
        receipt_date=receipt_date,
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    total_qty = _qty(0)
    total_amount = ZERO
    for line_id, qty in receiving.items():
        line = po_lines[line_id]
        GoodsReceiptItem.objects.create(receipt=receipt, po_item=line, item_id=line.item_id, received_quantity=qty)

        line.received_quantity = _qty(line.received_quantity + qty)
        line.save(update_fields=["received_quantity"])

        record_movement(
            item_id=line.item_id,
            warehouse_id=warehouse.id,
            movement_type=StockMovement.MovementType.PURCHASE,
            quantity=qty,
            unit_cost=line.unit_price,
            reference_doctype="GOODS_RECEIPT",
            reference_docno=receipt_no,
            remarks=f"Receipt {receipt_no} against PO {po.po_no}",
            movement_date=receipt_date,
            user=user,
        )
        total_qty += qty
        total_amount += _money(qty * line.unit_price)

    new_status = derive_receipt_status(po.id)
    if new_status != po.status:
        po.status = new_status
        po.save(update_fields=["status", "updated_at"])

    record_activity(
        action=Action.GOODS_RECEIPT_CREATE,
        entity_type="GOODS_RECEIPT",
        entity_id=receipt.id,
        description=f"Recorded receipt {receipt_no}: {total_qty} units, {_money(total_amount)} total",
        user=user,
        metadata={"po_no": po.po_no, "po_status": po.status},
    )
    logger.info(
        "Goods received",
        extra={"receipt_no": receipt_no, "po_no": po.po_no, "quantity": str(total_qty), "po_status": po.status},
    )
    return receipt
