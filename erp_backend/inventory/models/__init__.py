"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from .item import Item
from .stock_balance import StockBalance
from .stock_movement import StockMovement
from .warehouse import Warehouse

__all__ = [
    "Item",
    "Warehouse",
    "StockMovement",
    "StockBalance",
]
