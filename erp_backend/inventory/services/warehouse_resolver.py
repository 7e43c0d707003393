# inventory/services/warehouse_resolver.py

"""
======================================================
PATH: inventory/services/warehouse_resolver.py
======================================================
WAREHOUSE FALLBACK POLICY

Invoice lines must always post, even without an explicit warehouse and
even if that means picking an under-stocked warehouse (stock may go
negative). Resolution is an ordered list of strategies; the first one
returning a warehouse id wins.

SALE_WAREHOUSE_STRATEGIES (invoice line deduction):
1) explicit warehouse id on the line
2) warehouse holding >= requested quantity (largest balance first)
3) any warehouse holding a positive balance (largest first)
4) active warehouse with code ERP_DEFAULT_WAREHOUSE_CODE
5) ERP_FALLBACK_WAREHOUSE_ID

REVERSAL_WAREHOUSE_STRATEGIES (invoice deletion restock, used when a line
has no SALE movement of its own left to pair with):
1) warehouse recorded on the invoice line
2) warehouse of the first SALE movement for (invoice_no, item)
3) active warehouse with code ERP_DEFAULT_WAREHOUSE_CODE
4) ERP_FALLBACK_WAREHOUSE_ID
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from inventory.models import StockBalance, StockMovement, Warehouse

logger = logging.getLogger("stock")


@dataclass(frozen=True)
class WarehouseQuery:
    item_id: int
    quantity: Decimal = Decimal("0")
    explicit_warehouse_id: int | None = None
    reference_docno: str | None = None


def explicit_warehouse(q: WarehouseQuery) -> int | None:
    return int(q.explicit_warehouse_id) if q.explicit_warehouse_id else None


def warehouse_with_sufficient_stock(q: WarehouseQuery) -> int | None:
    return (
        StockBalance.objects.filter(item_id=q.item_id, quantity__gte=q.quantity)
        .order_by("-quantity", "warehouse_id")
        .values_list("warehouse_id", flat=True)
        .first()
    )


def warehouse_with_any_stock(q: WarehouseQuery) -> int | None:
    return (
        StockBalance.objects.filter(item_id=q.item_id, quantity__gt=0)
        .order_by("-quantity", "warehouse_id")
        .values_list("warehouse_id", flat=True)
        .first()
    )


def default_warehouse_code(q: WarehouseQuery) -> int | None:
    code = getattr(settings, "ERP_DEFAULT_WAREHOUSE_CODE", "WH-001")
    return (
        Warehouse.objects.filter(warehouse_code=code, is_active=True)
        .values_list("id", flat=True)
        .first()
    )


def fallback_warehouse_id(q: WarehouseQuery) -> int | None:
    return int(getattr(settings, "ERP_FALLBACK_WAREHOUSE_ID", 1))


def original_sale_warehouse(q: WarehouseQuery) -> int | None:
    if not q.reference_docno:
        return None
    return (
        StockMovement.objects.filter(
            reference_docno=q.reference_docno,
            item_id=q.item_id,
            movement_type=StockMovement.MovementType.SALE,
        )
        .order_by("id")
        .values_list("warehouse_id", flat=True)
        .first()
    )


SALE_WAREHOUSE_STRATEGIES = (
    explicit_warehouse,
    warehouse_with_sufficient_stock,
    warehouse_with_any_stock,
    default_warehouse_code,
    fallback_warehouse_id,
)

REVERSAL_WAREHOUSE_STRATEGIES = (
    explicit_warehouse,
    original_sale_warehouse,
    default_warehouse_code,
    fallback_warehouse_id,
)


def resolve_warehouse(query: WarehouseQuery, strategies=SALE_WAREHOUSE_STRATEGIES) -> int:
    for strategy in strategies:
        warehouse_id = strategy(query)
        if warehouse_id:
            logger.debug(
                "Warehouse resolved",
                extra={
                    "item_id": query.item_id,
                    "strategy": strategy.__name__,
                    "warehouse_id": warehouse_id,
                },
            )
            return warehouse_id

    # fallback_warehouse_id always answers; reaching here means it was removed
    raise LookupError("No warehouse resolution strategy produced a warehouse")


def resolve_sale_warehouse(item_id, quantity, explicit_warehouse_id=None) -> int:
    return resolve_warehouse(
        WarehouseQuery(
            item_id=item_id,
            quantity=Decimal(str(quantity)),
            explicit_warehouse_id=explicit_warehouse_id,
        ),
        SALE_WAREHOUSE_STRATEGIES,
    )


def resolve_reversal_warehouse(item_id, reference_docno: str, line_warehouse_id=None) -> int:
    return resolve_warehouse(
        WarehouseQuery(
            item_id=item_id,
            explicit_warehouse_id=line_warehouse_id,
            reference_docno=reference_docno,
        ),
        REVERSAL_WAREHOUSE_STRATEGIES,
    )
