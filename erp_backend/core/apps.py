# core/apps.py

"""
CORE APP CONFIG

Shared building blocks for every ERP module:
- Document numbering (per prefix, per year counters)
- Domain error taxonomy (mapped to HTTP status codes by views)
- Money / quantity helpers
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "ERP Core"
