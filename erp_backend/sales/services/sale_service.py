# sales/services/sale_service.py

"""
======================================================
PATH: sales/services/sale_service.py
======================================================
DIRECT SALE

record_sale():
- Checks availability in the chosen warehouse first (no negative stock on
  this path, unlike invoices).
- SALE-{year}-{seq} document, one SALE movement (-qty), one activity row.
- Single transaction: the audit row commits with the movement.

delete_sale():
- Removes the document only; the SALE movement stays.
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
from inventory.services.stock_ledger import (
    get_item,
    get_warehouse,
    record_movement,
    require_available,
)
from sales.models import Sale

logger = logging.getLogger("stock")


@transaction.atomic
def record_sale(
    *,
    item_id,
    warehouse_id,
    quantity,
    unit_price,
    customer_name: str = "",
    sale_date: date | None = None,
    invoice_no: str = "",
    remarks: str = "",
    user=None,
) -> Sale:
    qty = require_positive_qty(quantity)
    price = _money(to_decimal(unit_price, field_name="unit_price"))
    if price < ZERO:
        raise ERPValidationError("unit_price must not be negative")

    item = get_item(item_id)
    warehouse = get_warehouse(warehouse_id)

    require_available(item_id=item.id, warehouse_id=warehouse.id, quantity=qty)

    sale_no = generate_document_no(DocumentCounter.Prefix.SALE)
    customer_name = (customer_name or "").strip()
    sale_date = sale_date or timezone.localdate()

    sale = Sale.objects.create(
        sale_no=sale_no,
        item=item,
        warehouse=warehouse,
        quantity=qty,
        unit_price=price,
        total_amount=_money(qty * price),
        customer_name=customer_name,
        sale_date=sale_date,
        invoice_no=(invoice_no or "").strip(),
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    record_movement(
        item_id=item.id,
        warehouse_id=warehouse.id,
        movement_type=StockMovement.MovementType.SALE,
        quantity=-qty,
        reference_doctype="SALE",
        reference_docno=sale_no,
        remarks=f"Sale: {sale_no}" + (f" to {customer_name}" if customer_name else ""),
        movement_date=sale_date,
        user=user,
    )

    record_activity(
        action=Action.SALE_CREATE,
        entity_type="SALE",
        entity_id=sale.id,
        description=f"Recorded sale {sale_no}: {qty} units",
        user=user,
        metadata={"item_code": item.item_code, "warehouse_code": warehouse.warehouse_code},
    )

    logger.info(
        "Direct sale recorded",
        extra={"sale_no": sale_no, "item_code": item.item_code, "quantity": str(qty)},
    )
    return sale


@transaction.atomic
def delete_sale(sale_id, *, user=None) -> str:
    sale = Sale.objects.filter(id=sale_id).first()
    if sale is None:
        raise NotFoundError(f"Sale {sale_id} not found")

    sale_no = sale.sale_no
    sale.delete()

    record_activity(
        action=Action.SALE_DELETE,
        entity_type="SALE",
        entity_id=sale_id,
        description=f"Deleted sale {sale_no}",
        user=user,
    )
    logger.warning("Direct sale deleted; movement kept", extra={"sale_no": sale_no})
    return sale_no
