"""
PATH: production/models/__init__.py

Production models export surface.
"""

from .production import Production
from .production_input import ProductionInput

__all__ = [
    "Production",
    "ProductionInput",
]
