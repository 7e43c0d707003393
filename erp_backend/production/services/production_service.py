# production/services/production_service.py

"""
======================================================
PATH: production/services/production_service.py
======================================================
PRODUCTION SERVICES

record_production():
- Inputs are drawn from raw_materials_warehouse (defaults to the
  finished goods warehouse).
- Each input: lock + read balance, reject if short
  (InsufficientStockError), then a negative PRODUCTION movement.
- One positive PRODUCTION movement for the output.
- One activity row.
- One transaction: a shortage on any input rolls back every movement
  already written for earlier inputs.

delete_production():
- Removes the document and its inputs. Movements stay; stock is
  corrected separately with an adjustment if needed.
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
from core.utils import require_positive_qty
from inventory.models import StockMovement
from inventory.services.stock_ledger import (
    get_item,
    get_warehouse,
    record_movement,
    require_available,
)
from production.models import Production, ProductionInput

logger = logging.getLogger("stock")


@transaction.atomic
def record_production(
    *,
    output_item_id,
    output_quantity,
    warehouse_id,
    input_items,
    raw_materials_warehouse_id=None,
    production_date: date | None = None,
    remarks: str = "",
    user=None,
) -> Production:
    output_qty = require_positive_qty(output_quantity, field_name="output_quantity")
    if not input_items:
        raise ERPValidationError("At least one input item is required")

    output_item = get_item(output_item_id)
    finished_wh = get_warehouse(warehouse_id)
    materials_wh = get_warehouse(raw_materials_warehouse_id) if raw_materials_warehouse_id else finished_wh

    production_no = generate_document_no(DocumentCounter.Prefix.PRODUCTION)
    production_date = production_date or timezone.localdate()

    production = Production.objects.create(
        production_no=production_no,
        output_item=output_item,
        output_quantity=output_qty,
        warehouse=finished_wh,
        raw_materials_warehouse=materials_wh,
        production_date=production_date,
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    for idx, row in enumerate(input_items, start=1):
        item = get_item(row.get("item_id"))
        qty = require_positive_qty(row.get("quantity"), field_name=f"Input {idx} quantity")

        require_available(item_id=item.id, warehouse_id=materials_wh.id, quantity=qty)

        ProductionInput.objects.create(
            production=production, item=item, quantity=qty, warehouse=materials_wh
        )
        record_movement(
            item_id=item.id,
            warehouse_id=materials_wh.id,
            movement_type=StockMovement.MovementType.PRODUCTION,
            quantity=-qty,
            reference_doctype="PRODUCTION",
            reference_docno=production_no,
            remarks=f"Consumed for production: {production_no}",
            movement_date=production_date,
            user=user,
        )

    record_movement(
        item_id=output_item.id,
        warehouse_id=finished_wh.id,
        movement_type=StockMovement.MovementType.PRODUCTION,
        quantity=output_qty,
        reference_doctype="PRODUCTION",
        reference_docno=production_no,
        remarks=f"Produced to: {production_no}",
        movement_date=production_date,
        user=user,
    )

    record_activity(
        action=Action.PRODUCTION_CREATE,
        entity_type="PRODUCTION",
        entity_id=production.id,
        description=(
            f"Recorded production {production_no}: {output_qty} units produced "
            f"(materials from {materials_wh.warehouse_code}, goods to {finished_wh.warehouse_code})"
        ),
        user=user,
        metadata={"inputs": len(input_items), "output_item": output_item.item_code},
    )

    logger.info(
        "Production recorded",
        extra={
            "production_no": production_no,
            "output_item": output_item.item_code,
            "output_quantity": str(output_qty),
            "inputs": len(input_items),
        },
    )
    return production


@transaction.atomic
def delete_production(production_id, *, user=None) -> str:
    production = Production.objects.filter(id=production_id).first()
    if production is None:
        raise NotFoundError(f"Production {production_id} not found")

    production_no = production.production_no
    production.inputs.all().delete()
    production.delete()

    record_activity(
        action=Action.PRODUCTION_DELETE,
        entity_type="PRODUCTION",
        entity_id=production_id,
        description=f"Deleted production {production_no}",
        user=user,
    )
    logger.warning(
        "Production deleted; movements kept",
        extra={"production_no": production_no},
    )
    return production_no
