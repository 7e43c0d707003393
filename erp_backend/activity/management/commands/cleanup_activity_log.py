# activity/management/commands/cleanup_activity_log.py

from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand

from activity.services.activity_logger import activity_logger, cleanup


class Command(BaseCommand):
    help = "Delete activity log rows older than the retention window (default ERP_ACTIVITY_LOG_RETENTION_DAYS)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention window in days (overrides ERP_ACTIVITY_LOG_RETENTION_DAYS).",
        )

    def handle(self, *args, **options):
        days = options.get("days")
        if days is None:
            days = int(getattr(settings, "ERP_ACTIVITY_LOG_RETENTION_DAYS", 90))

        if days < 1:
            self.stderr.write(self.style.ERROR("--days must be >= 1"))
            raise SystemExit(1)

        activity_logger.flush()
        deleted = cleanup(days)

        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} activity log row(s) older than {days} day(s)."))
