"""
PATH: customers/models/__init__.py

Customers models export surface.
"""

from .customer import Customer
from .ledger_entry import CustomerLedgerEntry

__all__ = [
    "Customer",
    "CustomerLedgerEntry",
]
