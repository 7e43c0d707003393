# activity/tests/test_activity_logger.py

from datetime import timedelta
from unittest import mock

from django.db import DatabaseError, transaction
from django.test import TestCase
from django.utils import timezone

from activity.models import ActivityLog
from activity.services.activity_logger import (
    ActivityLogger,
    cleanup,
    get_by_entity,
    get_recent,
    record_activity,
)
from customers.models import Customer


class ActivityLoggerQueueTests(TestCase):
    """
    GUARANTEES:
    - Entries are queued only after the caller's transaction commits
    - Entries are buffered until the batch size is reached
    - A failed write never breaks the caller's transaction
    - A permanently failing entry is dropped after max_attempts
    """

    def log(self, logger, **kwargs):
        with self.captureOnCommitCallbacks(execute=True):
            logger.log(**kwargs)

    def test_entries_buffer_until_batch_size(self):
        log = ActivityLogger(batch_size=3, flush_seconds=3600)

        self.log(log, action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-1")
        self.log(log, action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-2")
        self.assertEqual(ActivityLog.objects.count(), 0)
        self.assertEqual(log.pending, 2)

        self.log(log, action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-3")
        self.assertEqual(ActivityLog.objects.count(), 3)
        self.assertEqual(log.pending, 0)

    def test_time_trigger_flushes_on_next_log(self):
        log = ActivityLogger(batch_size=100, flush_seconds=0)
        self.log(log, action="PAYMENT_CREATE", entity_type="PAYMENT", entity_id="PAY-1")
        self.assertEqual(ActivityLog.objects.count(), 1)

    def test_rolled_back_operation_is_not_queued(self):
        log = ActivityLogger(batch_size=1)

        with self.captureOnCommitCallbacks(execute=True):
            try:
                with transaction.atomic():
                    log.log(action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-X")
                    raise DatabaseError("boom")
            except DatabaseError:
                pass

        self.assertEqual(log.pending, 0)
        self.assertEqual(ActivityLog.objects.count(), 0)

    def test_failed_batch_is_retried_per_entry(self):
        log = ActivityLogger(batch_size=100, flush_seconds=3600)
        self.log(log, action="PAYMENT_DELETE", entity_type="PAYMENT", entity_id="PAY-9")

        with mock.patch.object(
            ActivityLog.objects, "bulk_create", side_effect=DatabaseError("locked")
        ):
            self.assertEqual(log.flush(), 1)

        self.assertEqual(log.pending, 0)
        self.assertEqual(ActivityLog.objects.filter(entity_id="PAY-9").count(), 1)

    def test_bad_entry_leaves_transaction_usable_and_is_dropped(self):
        customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        log = ActivityLogger(batch_size=100, flush_seconds=3600, max_attempts=2)

        self.log(log, action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-1")
        self.log(log, action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-BAD", log_level=None)

        with transaction.atomic():
            self.assertEqual(log.flush(), 1)
            self.assertEqual(Customer.objects.filter(id=customer.id).count(), 1)
            Customer.objects.filter(id=customer.id).update(customer_name="Acme Ltd")

        customer.refresh_from_db()
        self.assertEqual(customer.customer_name, "Acme Ltd")
        self.assertEqual(log.pending, 1)

        self.assertEqual(log.flush(), 0)
        self.assertEqual(log.pending, 0)
        self.assertEqual(ActivityLog.objects.filter(entity_id="INV-1").count(), 1)
        self.assertFalse(ActivityLog.objects.filter(entity_id="INV-BAD").exists())

    def test_metadata_and_entity_id_are_stored(self):
        log = ActivityLogger(batch_size=1)
        self.log(
            log,
            action="STOCK_MOVEMENT",
            entity_type="ITEM",
            entity_id=42,
            metadata={"qty": "5.000"},
        )
        row = ActivityLog.objects.get()
        self.assertEqual(row.entity_id, "42")
        self.assertEqual(row.metadata, {"qty": "5.000"})


class ActivityLogQueryTests(TestCase):
    def setUp(self):
        record_activity(action="INVOICE_CREATE", entity_type="INVOICE", entity_id="INV-1")
        record_activity(action="INVOICE_DELETE", entity_type="INVOICE", entity_id="INV-1")
        record_activity(action="PAYMENT_CREATE", entity_type="PAYMENT", entity_id="PAY-1")

    def test_get_by_entity(self):
        rows = list(get_by_entity("INVOICE", "INV-1"))
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0].action, "INVOICE_DELETE")

    def test_get_recent_filters(self):
        self.assertEqual(len(get_recent(limit=10)), 3)
        self.assertEqual(len(get_recent(action="PAYMENT_CREATE")), 1)

    def test_cleanup_deletes_old_rows_only(self):
        ActivityLog.objects.filter(action="INVOICE_CREATE").update(
            created_at=timezone.now() - timedelta(days=120)
        )
        self.assertEqual(cleanup(90), 1)
        self.assertEqual(ActivityLog.objects.count(), 2)
