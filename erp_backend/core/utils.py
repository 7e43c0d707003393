# core/utils.py

"""
MONEY / QUANTITY HELPERS

Rules:
- Money is Decimal quantized to 2 places (ROUND_HALF_UP).
- Quantities are Decimal quantized to 3 places.
- Never use float arithmetic for balances.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.exceptions import ERPValidationError

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _qty(v) -> Decimal:
    return Decimal(str(v or "0")).quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def to_decimal(value, *, field_name: str = "value", required: bool = True) -> Decimal | None:
    """Parse user input into Decimal, raising ERPValidationError on junk."""
    if value is None or value == "" or value == "null":
        if required:
            raise ERPValidationError(f"{field_name} is required")
        return None
    if isinstance(value, bool):
        raise ERPValidationError(f"{field_name} must be a number")
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ERPValidationError(f"{field_name} must be a valid decimal") from exc


def require_positive_money(value, *, field_name: str) -> Decimal:
    amount = _money(to_decimal(value, field_name=field_name))
    if amount <= ZERO:
        raise ERPValidationError(f"{field_name} must be greater than zero")
    return amount


def require_positive_qty(value, *, field_name: str = "quantity") -> Decimal:
    qty = _qty(to_decimal(value, field_name=field_name))
    if qty <= 0:
        raise ERPValidationError(f"{field_name} must be greater than zero")
    return qty
