# reconciliation/apps.py

import logging

from django.apps import AppConfig
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError
from django.db.models.signals import post_migrate

logger = logging.getLogger("repair")


def run_repair_after_migrate(sender, using=DEFAULT_DB_ALIAS, **kwargs):
    if not getattr(settings, "ERP_REPAIR_ON_MIGRATE", False) or using != DEFAULT_DB_ALIAS:
        return

    from reconciliation.services.repair import run_repair_pass

    try:
        run_repair_pass()
    except DatabaseError:
        logger.exception("Startup repair pass failed")


class ReconciliationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "reconciliation"
    verbose_name = "Consistency Repair"

    def ready(self):
        post_migrate.connect(
            run_repair_after_migrate,
            sender=self,
            dispatch_uid="reconciliation.run_repair_after_migrate",
        )
