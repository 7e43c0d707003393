# core/exceptions.py

"""
ERP SERVICE ERRORS

Centralized domain errors raised by service functions.

Views map them to HTTP responses using `status_code`:
- ERPValidationError      -> 400
- NotFoundError           -> 404
- InsufficientStockError  -> 409

Every service runs inside transaction.atomic, so raising any of these
rolls back all writes made by the operation.
"""

from __future__ import annotations

from decimal import Decimal


class ERPServiceError(Exception):
    """Base exception for all ERP service failures."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict:
        return {"detail": self.message or self.__class__.__name__}


class ERPValidationError(ERPServiceError):
    """Missing required field, non-positive amount, allocation mismatch."""

    status_code = 400


class NotFoundError(ERPServiceError):
    """Unknown item / warehouse / invoice / customer / payment id."""

    status_code = 404


class InsufficientStockError(ERPValidationError):
    """Requested quantity exceeds the available balance."""

    status_code = 409

    def __init__(
        self,
        *,
        available: Decimal,
        required: Decimal,
        item_name: str | None = None,
        message: str | None = None,
    ):
        self.available = available
        self.required = required
        self.item_name = item_name

        if message is None:
            if item_name:
                message = (
                    f"Insufficient stock for {item_name} in warehouse. "
                    f"Available: {available}, Required: {required}"
                )
            else:
                message = f"Insufficient stock. Available: {available}, Required: {required}"

        super().__init__(message)

    def as_dict(self) -> dict:
        return {
            "detail": self.message,
            "available": str(self.available),
            "required": str(self.required),
        }
