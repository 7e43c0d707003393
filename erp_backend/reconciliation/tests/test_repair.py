# reconciliation/tests/test_repair.py

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from activity.models import ActivityLog
from customers.models import Customer, CustomerLedgerEntry
from inventory.models import Item, StockBalance, Warehouse
from inventory.services.stock_ledger import record_movement
from reconciliation.apps import run_repair_after_migrate
from reconciliation.services.repair import check_drift, run_repair_pass
from sales.models import Invoice
from sales.services.invoice_service import create_invoice
from sales.services.payment_service import create_payment

User = get_user_model()


class RepairFixtureMixin:
    def setUp(self):
        self.customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        self.item = Item.objects.create(item_code="FG-001", item_name="Bread", selling_price="10.00")
        self.wh = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")
        self.other_wh = Warehouse.objects.create(warehouse_code="WH-002", warehouse_name="Annex")
        record_movement(
            item_id=self.item.id, warehouse_id=self.wh.id, movement_type="PURCHASE", quantity=50
        )
        self.invoice = create_invoice(
            customer_id=self.customer.id,
            invoice_date=timezone.localdate(),
            items=[{"item_id": self.item.id, "quantity": "10", "unit_price": "10.00", "warehouse_id": self.wh.id}],
        )
        self.payment = create_payment(
            customer_id=self.customer.id,
            amount="100.00",
            invoice_allocations=[{"invoice_id": self.invoice.id, "amount": "100.00"}],
        )


class RepairPassTests(RepairFixtureMixin, TestCase):
    def test_consistent_data_reports_zero(self):
        report = run_repair_pass()
        self.assertEqual(report.total_changes, 0)
        self.assertFalse(ActivityLog.objects.filter(action="REPAIR_RUN").exists())

    def test_stock_balance_drift_is_corrected(self):
        StockBalance.objects.filter(item=self.item, warehouse=self.wh).update(quantity=Decimal("999"))

        report = run_repair_pass()

        self.assertEqual(report.stock_balances_fixed, 1)
        self.assertEqual(StockBalance.objects.get(item=self.item, warehouse=self.wh).quantity, Decimal("40.000"))

    def test_missing_balance_is_created_and_orphan_removed(self):
        StockBalance.objects.filter(item=self.item, warehouse=self.wh).delete()
        StockBalance.objects.create(item=self.item, warehouse=self.other_wh, quantity=Decimal("7"))

        report = run_repair_pass()

        self.assertEqual(report.stock_balances_created, 1)
        self.assertEqual(report.orphan_balances_removed, 1)
        self.assertFalse(StockBalance.objects.filter(warehouse=self.other_wh).exists())
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("40.000"))

    def test_item_stock_is_resynced(self):
        Item.objects.filter(id=self.item.id).update(current_stock=Decimal("1"))

        report = run_repair_pass()

        self.assertEqual(report.item_stock_synced, 1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("40.000"))

    def test_invoice_balance_and_status_are_recomputed(self):
        Invoice.objects.filter(id=self.invoice.id).update(
            paid_amount=Decimal("0.00"), balance_amount=Decimal("100.00"), status="Unpaid"
        )

        report = run_repair_pass()

        self.assertEqual(report.invoice_balances_fixed, 1)
        self.assertEqual(report.invoice_statuses_changed, 1)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.paid_amount, Decimal("100.00"))
        self.assertEqual(self.invoice.balance_amount, Decimal("0.00"))
        self.assertEqual(self.invoice.status, "Paid")

    def test_customer_balance_is_recomputed(self):
        Customer.objects.filter(id=self.customer.id).update(current_balance=Decimal("999.00"))

        report = run_repair_pass()

        self.assertEqual(report.customer_balances_fixed, 1)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

    def test_payment_description_ids_become_invoice_numbers(self):
        entry = CustomerLedgerEntry.objects.get(reference_no=self.payment.payment_no)
        CustomerLedgerEntry.objects.filter(id=entry.id).update(
            description=f"Payment against {self.invoice.id}, 987654"
        )

        report = run_repair_pass()

        self.assertEqual(report.payment_descriptions_fixed, 1)
        entry.refresh_from_db()
        self.assertEqual(
            entry.description, f"Payment against {self.invoice.invoice_no}, Invoice #987654"
        )

    def test_second_run_reports_zero(self):
        StockBalance.objects.filter(item=self.item, warehouse=self.wh).update(quantity=Decimal("0"))
        Customer.objects.filter(id=self.customer.id).update(current_balance=Decimal("5.00"))

        first = run_repair_pass()
        second = run_repair_pass()

        self.assertEqual(first.total_changes, 2)
        self.assertEqual(second.total_changes, 0)
        self.assertEqual(ActivityLog.objects.filter(action="REPAIR_RUN").count(), 1)

    def test_dry_run_writes_nothing(self):
        Item.objects.filter(id=self.item.id).update(current_stock=Decimal("1"))

        report = check_drift()

        self.assertTrue(report.dry_run)
        self.assertEqual(report.item_stock_synced, 1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("1.000"))
        self.assertFalse(ActivityLog.objects.filter(action="REPAIR_RUN").exists())


class RepairTriggerTests(RepairFixtureMixin, TestCase):
    def test_post_migrate_hook_respects_setting(self):
        Item.objects.filter(id=self.item.id).update(current_stock=Decimal("1"))

        with override_settings(ERP_REPAIR_ON_MIGRATE=False):
            run_repair_after_migrate(sender=None)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("1.000"))

        with override_settings(ERP_REPAIR_ON_MIGRATE=True):
            run_repair_after_migrate(sender=None)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("40.000"))

    def test_command_dry_run(self):
        Item.objects.filter(id=self.item.id).update(current_stock=Decimal("1"))
        out = StringIO()

        call_command("repair_balances", "--dry-run", stdout=out)

        self.assertIn("Would change 1 value(s).", out.getvalue())
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("1.000"))

    def test_command_repairs(self):
        Item.objects.filter(id=self.item.id).update(current_stock=Decimal("1"))
        out = StringIO()

        call_command("repair_balances", stdout=out)

        self.assertIn("Changed 1 value(s).", out.getvalue())
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("40.000"))


class RepairApiTests(RepairFixtureMixin, APITestCase):
    def test_admin_can_run(self):
        admin = User.objects.create_user(email="admin@erp.test", password="pass12345", role=User.ROLE_ADMIN)
        self.client.force_authenticate(admin)
        Customer.objects.filter(id=self.customer.id).update(current_balance=Decimal("3.00"))

        res = self.client.post("/api/reconciliation/run/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["customer_balances_fixed"], 1)
        self.assertEqual(res.data["total_changes"], 1)

    def test_accountant_can_check_but_not_run(self):
        accountant = User.objects.create_user(
            email="acct@erp.test", password="pass12345", role=User.ROLE_ACCOUNTANT
        )
        self.client.force_authenticate(accountant)

        self.assertEqual(self.client.post("/api/reconciliation/run/").status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.get("/api/reconciliation/check/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["dry_run"])
        self.assertEqual(res.data["total_changes"], 0)
