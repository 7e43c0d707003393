# reconciliation/management/commands/repair_balances.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from reconciliation.services.repair import run_repair_pass


class Command(BaseCommand):
    help = "Recompute stock balances, item stock, invoice balances/statuses and customer balances from source rows."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change and roll back.",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        report = run_repair_pass(dry_run=dry_run)

        for key, value in report.as_dict().items():
            if key in ("dry_run", "total_changes"):
                continue
            self.stdout.write(f"  {key}: {value}")

        verb = "Would change" if dry_run else "Changed"
        style = self.style.WARNING if dry_run and report.total_changes else self.style.SUCCESS
        self.stdout.write(style(f"{verb} {report.total_changes} value(s)."))
