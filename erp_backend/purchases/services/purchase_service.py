# purchases/services/purchase_service.py

"""
======================================================
PATH: purchases/services/purchase_service.py
======================================================
PURCHASE RECEIPT

record_purchase():
- quantity > 0, unit_cost >= 0, item and warehouse must exist
- PURCH-{year}-{seq} document
- one PURCHASE movement (+qty) at unit_cost
- one activity row, written in the same transaction

delete_purchase():
- Removes the document only. The PURCHASE movement stays; correct stock
  with an adjustment if the goods did not arrive.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from activity.services.activity_logger import Action, record_activity
from core.exceptions import ERPValidationError, NotFoundError
from core.models import DocumentCounter
from core.services.numbering import generate_document_no
from core.utils import ZERO, _money, require_positive_qty, to_decimal
from inventory.models import StockMovement
from inventory.services.stock_ledger import get_item, get_warehouse, record_movement
from purchases.models import Purchase

logger = logging.getLogger("stock")


@transaction.atomic
def record_purchase(
    *,
    item_id,
    warehouse_id,
    quantity,
    unit_cost,
    supplier_name: str = "",
    purchase_date: date | None = None,
    invoice_no: str = "",
    remarks: str = "",
    user=None,
) -> Purchase:
    qty = require_positive_qty(quantity)
    cost = _money(to_decimal(unit_cost, field_name="unit_cost"))
    if cost < ZERO:
        raise ERPValidationError("unit_cost must not be negative")

    item = get_item(item_id)
    warehouse = get_warehouse(warehouse_id)

    purchase_no = generate_document_no(DocumentCounter.Prefix.PURCHASE)
    supplier_name = (supplier_name or "").strip()
    purchase_date = purchase_date or timezone.localdate()

    purchase = Purchase.objects.create(
        purchase_no=purchase_no,
        item=item,
        warehouse=warehouse,
        quantity=qty,
        unit_cost=cost,
        total_cost=_money(qty * cost),
        supplier_name=supplier_name,
        purchase_date=purchase_date,
        invoice_no=(invoice_no or "").strip(),
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    record_movement(
        item_id=item.id,
        warehouse_id=warehouse.id,
        movement_type=StockMovement.MovementType.PURCHASE,
        quantity=qty,
        unit_cost=cost,
        reference_doctype="PURCHASE",
        reference_docno=purchase_no,
        remarks=f"Purchase: {purchase_no}" + (f" from {supplier_name}" if supplier_name else ""),
        movement_date=purchase_date,
        user=user,
    )

    record_activity(
        action=Action.PURCHASE_CREATE,
        entity_type="PURCHASE",
        entity_id=purchase.id,
        description=f"Recorded purchase {purchase_no}: {qty} units",
        user=user,
        metadata={"item_code": item.item_code, "total_cost": str(purchase.total_cost)},
    )

    logger.info(
        "Purchase recorded",
        extra={"purchase_no": purchase_no, "item_code": item.item_code, "quantity": str(qty)},
    )
    return purchase


@transaction.atomic
def delete_purchase(purchase_id, *, user=None) -> str:
    purchase = Purchase.objects.filter(id=purchase_id).first()
    if purchase is None:
        raise NotFoundError(f"Purchase {purchase_id} not found")

    purchase_no = purchase.purchase_no
    purchase.delete()

    record_activity(
        action=Action.PURCHASE_DELETE,
        entity_type="PURCHASE",
        entity_id=purchase_id,
        description=f"Deleted purchase {purchase_no}",
        user=user,
    )
    logger.warning("Purchase deleted; movement kept", extra={"purchase_no": purchase_no})
    return purchase_no
