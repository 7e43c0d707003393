"""
PATH: sales/models/__init__.py

Sales models export surface.
"""

from .invoice import Invoice
from .invoice_item import InvoiceItem
from .payment import Payment
from .payment_allocation import PaymentAllocation
from .sale import Sale

__all__ = [
    "Invoice",
    "InvoiceItem",
    "Payment",
    "PaymentAllocation",
    "Sale",
]
