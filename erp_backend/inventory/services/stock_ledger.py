# inventory/services/stock_ledger.py

"""
======================================================
PATH: inventory/services/stock_ledger.py
======================================================
STOCK LEDGER SERVICES

Purpose:
- record_movement(): the ONLY write path for stock. One call =
    1) StockMovement insert (STK-{year}-{seq})
    2) StockBalance upsert for (item, warehouse) by the signed quantity
    3) Item.current_stock full recompute from StockBalance
- Read helpers for the item ledger, balances and per-warehouse summary.

Rules:
- The ledger never blocks negative balances. Callers that must not
  oversell (direct sale, production) check availability first.
- Zero quantity is not rejected here.
- Multi-line documents wrap their calls in one outer transaction; this
  function joins it (savepoint) instead of committing on its own.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from activity.services.activity_logger import Action, activity_logger
from core.exceptions import ERPValidationError, InsufficientStockError, NotFoundError
from core.services.numbering import next_movement_no
from core.utils import _money, _qty, to_decimal
from inventory.models import Item, StockBalance, StockMovement, Warehouse

logger = logging.getLogger("stock")

ZERO_QTY = Decimal("0.000")


def get_item(item_id) -> Item:
    item = Item.objects.filter(id=item_id).first()
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return item


def get_warehouse(warehouse_id) -> Warehouse:
    warehouse = Warehouse.objects.filter(id=warehouse_id).first()
    if warehouse is None:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


def _apply_to_balance(*, item_id, warehouse_id, quantity: Decimal) -> None:
    updated = (
        StockBalance.objects.filter(item_id=item_id, warehouse_id=warehouse_id)
        .update(quantity=F("quantity") + quantity, last_updated=timezone.now())
    )
    if not updated:
        StockBalance.objects.create(
            item_id=item_id, warehouse_id=warehouse_id, quantity=quantity
        )


def sync_item_stock(item_id) -> Decimal:
    """Full recompute of Item.current_stock from its balance rows."""
    total = (
        StockBalance.objects.filter(item_id=item_id).aggregate(total=Sum("quantity"))["total"]
        or ZERO_QTY
    )
    Item.objects.filter(id=item_id).update(current_stock=total, updated_at=timezone.now())
    return _qty(total)


@transaction.atomic
def record_movement(
    *,
    item_id,
    warehouse_id,
    movement_type: str,
    quantity,
    unit_cost=None,
    reference_doctype: str | None = None,
    reference_docno: str | None = None,
    remarks: str | None = None,
    movement_date=None,
    user=None,
) -> dict:
    """
    Append one stock movement and refresh the cached balances.

    Returns {"movement_id", "movement_no"}.
    """
    mtype = (movement_type or "").strip().upper()
    if mtype not in StockMovement.MovementType.values:
        raise ERPValidationError(f"Invalid movement_type: {movement_type!r}")

    qty = _qty(to_decimal(quantity, field_name="quantity"))
    cost = to_decimal(unit_cost, field_name="unit_cost", required=False)

    item = get_item(item_id)
    warehouse = get_warehouse(warehouse_id)

    movement_no = next_movement_no()

    movement = StockMovement.objects.create(
        movement_no=movement_no,
        item=item,
        warehouse=warehouse,
        movement_type=mtype,
        quantity=qty,
        unit_cost=_money(cost) if cost is not None else None,
        reference_doctype=(reference_doctype or "").strip(),
        reference_docno=(reference_docno or "").strip(),
        remarks=(remarks or "").strip(),
        movement_date=movement_date or timezone.localdate(),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    _apply_to_balance(item_id=item.id, warehouse_id=warehouse.id, quantity=qty)
    current_stock = sync_item_stock(item.id)

    logger.info(
        "Stock movement recorded",
        extra={
            "movement_no": movement_no,
            "item_code": item.item_code,
            "warehouse_code": warehouse.warehouse_code,
            "movement_type": mtype,
            "quantity": str(qty),
            "reference_docno": movement.reference_docno,
            "current_stock": str(current_stock),
        },
    )

    return {"movement_id": movement.id, "movement_no": movement_no}


@transaction.atomic
def record_adjustment(
    *,
    item_id,
    warehouse_id,
    quantity,
    remarks: str = "",
    unit_cost=None,
    user=None,
) -> dict:
    """Manual stock correction (signed), audited as STOCK_MOVEMENT."""
    qty = _qty(to_decimal(quantity, field_name="quantity"))
    if qty == ZERO_QTY:
        raise ERPValidationError("Adjustment quantity must not be zero")

    result = record_movement(
        item_id=item_id,
        warehouse_id=warehouse_id,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        quantity=qty,
        unit_cost=unit_cost,
        reference_doctype="ADJUSTMENT",
        remarks=remarks,
        user=user,
    )

    activity_logger.log_crud(
        Action.STOCK_MOVEMENT,
        "STOCK_MOVEMENT",
        result["movement_no"],
        user=user,
        description=f"Stock adjustment {qty} for item {item_id} in warehouse {warehouse_id}",
        metadata={"quantity": str(qty), "item_id": item_id, "warehouse_id": warehouse_id},
    )
    return result


def get_item_ledger(item_id, warehouse_id=None):
    """Movements for an item, newest first. Display/audit only."""
    get_item(item_id)

    qs = StockMovement.objects.filter(item_id=item_id).select_related("warehouse", "item")
    if warehouse_id:
        qs = qs.filter(warehouse_id=warehouse_id)
    return qs.order_by("-movement_date", "-created_at", "-id")


def get_balance(item_id, warehouse_id) -> Decimal:
    qty = (
        StockBalance.objects.filter(item_id=item_id, warehouse_id=warehouse_id)
        .values_list("quantity", flat=True)
        .first()
    )
    return _qty(qty) if qty is not None else ZERO_QTY


def stock_summary(*, item_id=None, include_inactive: bool = False) -> list[dict]:
    """Per item: cached total, value at standard cost and per-warehouse breakdown."""
    items = Item.objects.all()
    if item_id:
        items = items.filter(id=item_id)
    if not include_inactive:
        items = items.filter(is_active=True)

    balances: dict[int, list[dict]] = {}
    rows = (
        StockBalance.objects.filter(item__in=items)
        .select_related("warehouse")
        .order_by("item_id", "warehouse__warehouse_code")
    )
    for b in rows:
        balances.setdefault(b.item_id, []).append(
            {
                "warehouse_id": b.warehouse_id,
                "warehouse_code": b.warehouse.warehouse_code,
                "quantity": b.quantity,
            }
        )

    return [
        {
            "item_id": item.id,
            "item_code": item.item_code,
            "item_name": item.item_name,
            "unit_of_measure": item.unit_of_measure,
            "current_stock": item.current_stock,
            "stock_value": _money(item.current_stock * item.standard_cost),
            "is_low_stock": item.reorder_level > 0 and item.current_stock <= item.reorder_level,
            "warehouses": balances.get(item.id, []),
        }
        for item in items.order_by("item_code")
    ]


def require_available(*, item_id, warehouse_id, quantity) -> Decimal:
    """
    Read-then-check against the cached balance, locking the row for the
    rest of the caller's transaction. Raises InsufficientStockError.
    """
    required = _qty(quantity)
    row = (
        StockBalance.objects.select_for_update()
        .filter(item_id=item_id, warehouse_id=warehouse_id)
        .values_list("quantity", flat=True)
        .first()
    )
    available = _qty(row) if row is not None else ZERO_QTY

    if available < required:
        item = get_item(item_id)
        raise InsufficientStockError(
            available=available, required=required, item_name=item.item_name
        )
    return available
