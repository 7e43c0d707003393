# sales/tests/test_invoice_service.py

from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum
from django.test import TestCase, override_settings
from django.utils import timezone

from core.exceptions import ERPValidationError, NotFoundError
from customers.models import Customer, CustomerLedgerEntry
from inventory.models import Item, StockBalance, StockMovement, Warehouse
from inventory.services.stock_ledger import get_balance, record_movement
from sales.models import Invoice, InvoiceItem, Payment, PaymentAllocation
from sales.services.invoice_service import (
    create_invoice,
    delete_invoice,
    get_invoice_payments,
    update_invoice,
)
from sales.services.payment_service import create_payment


class InvoiceFixtureMixin:
    def setUp(self):
        self.today = timezone.localdate()
        self.customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        self.item = Item.objects.create(item_code="FG-001", item_name="Bread", selling_price="10.00")
        self.main = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")
        self.annex = Warehouse.objects.create(warehouse_code="WH-002", warehouse_name="Annex")

    def stock(self, warehouse, qty, item=None):
        record_movement(
            item_id=(item or self.item).id,
            warehouse_id=warehouse.id,
            movement_type="PURCHASE",
            quantity=qty,
            unit_cost="4.00",
        )

    def make_invoice(self, qty="10", price="10.00", **kwargs):
        kwargs.setdefault("customer_id", self.customer.id)
        kwargs.setdefault("invoice_date", self.today)
        return create_invoice(
            items=[{"item_id": self.item.id, "quantity": qty, "unit_price": price}],
            **kwargs,
        )

    def assert_invariants(self):
        for bal in StockBalance.objects.all():
            total = StockMovement.objects.filter(
                item_id=bal.item_id, warehouse_id=bal.warehouse_id
            ).aggregate(t=Sum("quantity"))["t"]
            self.assertEqual(bal.quantity, total)

        for inv in Invoice.objects.all():
            paid = inv.allocations.aggregate(t=Sum("amount"))["t"] or Decimal("0.00")
            self.assertEqual(inv.paid_amount, paid)
            self.assertEqual(inv.balance_amount, inv.total_amount - inv.paid_amount)

        for pay in Payment.objects.all():
            allocated = pay.allocations.aggregate(t=Sum("amount"))["t"] or Decimal("0.00")
            self.assertLessEqual(abs(allocated - pay.amount), Decimal("0.01"))

        for cust in Customer.objects.all():
            open_total = cust.invoices.filter(
                status__in=["Unpaid", "Partially Paid", "Overdue"]
            ).aggregate(t=Sum("balance_amount"))["t"] or Decimal("0.00")
            self.assertEqual(cust.current_balance, open_total)


class CreateInvoiceTests(InvoiceFixtureMixin, TestCase):
    def test_unpaid_invoice_scenario(self):
        self.stock(self.main, 50)
        invoice = self.make_invoice()

        self.assertEqual(invoice.status, "Unpaid")
        self.assertEqual(invoice.total_amount, Decimal("100.00"))
        self.assertEqual(invoice.paid_amount, Decimal("0.00"))
        self.assertEqual(invoice.balance_amount, Decimal("100.00"))

        sales = StockMovement.objects.filter(movement_type="SALE", reference_docno=invoice.invoice_no)
        self.assertEqual(sales.count(), 1)
        self.assertEqual(sales.get().quantity, Decimal("-10.000"))
        self.assertEqual(sales.get().reference_doctype, "INVOICE")

        entry = CustomerLedgerEntry.objects.get(reference_no=invoice.invoice_no)
        self.assertEqual(entry.transaction_type, "INVOICE")
        self.assertEqual(entry.debit, Decimal("100.00"))
        self.assertEqual(entry.credit, Decimal("0.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("100.00"))
        self.assert_invariants()

    def test_number_is_generated(self):
        invoice = self.make_invoice()
        self.assertEqual(invoice.invoice_no, f"INV-{self.today.year}-0001")

    def test_due_date_defaults_from_payment_terms(self):
        invoice = self.make_invoice()
        self.assertEqual(invoice.due_date, self.today + timedelta(days=30))

    def test_line_amount_is_quantity_times_price(self):
        invoice = self.make_invoice(qty="2.5", price="4.00")
        line = InvoiceItem.objects.get(invoice=invoice)
        self.assertEqual(line.amount, Decimal("10.00"))
        self.assertEqual(invoice.total_amount, Decimal("10.00"))

    def test_caller_total_is_kept(self):
        invoice = self.make_invoice(total_amount="115.00")
        self.assertEqual(invoice.total_amount, Decimal("115.00"))
        self.assertEqual(invoice.balance_amount, Decimal("115.00"))

    def test_full_immediate_payment_marks_paid(self):
        invoice = self.make_invoice(payment={"amount": "100.00", "payment_method": "Cash"})

        self.assertEqual(invoice.status, "Paid")
        self.assertEqual(invoice.paid_amount, Decimal("100.00"))
        self.assertEqual(invoice.balance_amount, Decimal("0.00"))

        payment = Payment.objects.get()
        self.assertEqual(payment.allocations.get().invoice_id, invoice.id)
        credit = CustomerLedgerEntry.objects.get(reference_no=payment.payment_no)
        self.assertEqual(credit.credit, Decimal("100.00"))
        self.assertEqual(credit.description, f"Payment {payment.payment_no} for Invoice {invoice.invoice_no}")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assert_invariants()

    def test_partial_immediate_payment(self):
        invoice = self.make_invoice(payment={"amount": "30"})
        self.assertEqual(invoice.status, "Partially Paid")
        self.assertEqual(invoice.balance_amount, Decimal("70.00"))

    def test_zero_payment_is_ignored(self):
        self.make_invoice(payment={"amount": "0"})
        self.assertFalse(Payment.objects.exists())

    def test_past_due_date_is_overdue(self):
        invoice = self.make_invoice(
            invoice_date=self.today - timedelta(days=40),
            due_date=self.today - timedelta(days=10),
        )
        self.assertEqual(invoice.status, "Overdue")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("100.00"))

    def test_explicit_warehouse_wins(self):
        self.stock(self.main, 50)
        invoice = create_invoice(
            customer_id=self.customer.id,
            invoice_date=self.today,
            items=[{"item_id": self.item.id, "warehouse_id": self.annex.id, "quantity": 5, "unit_price": 10}],
        )
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("-5.000"))
        self.assertEqual(InvoiceItem.objects.get(invoice=invoice).warehouse_id, self.annex.id)

    def test_sufficient_stock_warehouse_preferred(self):
        self.stock(self.main, 3)
        self.stock(self.annex, 20)
        self.make_invoice(qty="5")
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("15.000"))
        self.assertEqual(get_balance(self.item.id, self.main.id), Decimal("3.000"))

    def test_no_stock_anywhere_still_posts_and_goes_negative(self):
        invoice = self.make_invoice()
        self.assertEqual(invoice.status, "Unpaid")
        self.assertEqual(get_balance(self.item.id, self.main.id), Decimal("-10.000"))

    def test_fallback_warehouse_id_when_default_code_missing(self):
        self.main.is_active = False
        self.main.save()
        with override_settings(ERP_FALLBACK_WAREHOUSE_ID=self.annex.id):
            self.make_invoice(qty="1")
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("-1.000"))

    def test_unknown_customer(self):
        with self.assertRaises(NotFoundError):
            self.make_invoice(customer_id=999999)
        self.assertFalse(StockMovement.objects.exists())

    def test_items_required(self):
        with self.assertRaises(ERPValidationError):
            create_invoice(customer_id=self.customer.id, invoice_date=self.today, items=[])

    def test_non_positive_quantity_rejected(self):
        with self.assertRaises(ERPValidationError):
            self.make_invoice(qty="0")
        self.assertFalse(Invoice.objects.exists())

    def test_unknown_item_rejected_before_write(self):
        with self.assertRaises(NotFoundError):
            create_invoice(
                customer_id=self.customer.id,
                invoice_date=self.today,
                items=[{"item_id": 424242, "quantity": 1, "unit_price": 1}],
            )
        self.assertFalse(Invoice.objects.exists())

    def test_duplicate_number_rejected(self):
        self.make_invoice(invoice_no="INV-MANUAL-1")
        with self.assertRaises(ERPValidationError):
            self.make_invoice(invoice_no="INV-MANUAL-1")


class PaymentScenarioTests(InvoiceFixtureMixin, TestCase):
    def test_partial_then_full_payment(self):
        self.stock(self.main, 50)
        invoice = self.make_invoice()

        create_payment(
            customer_id=self.customer.id,
            amount="60",
            invoice_allocations=[{"invoice_id": invoice.id, "amount": "60"}],
        )
        invoice.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(invoice.paid_amount, Decimal("60.00"))
        self.assertEqual(invoice.balance_amount, Decimal("40.00"))
        self.assertEqual(invoice.status, "Partially Paid")
        self.assertEqual(self.customer.current_balance, Decimal("40.00"))

        create_payment(
            customer_id=self.customer.id,
            amount="40",
            invoice_allocations=[{"invoice_id": invoice.id, "amount": "40"}],
        )
        invoice.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(invoice.balance_amount, Decimal("0.00"))
        self.assertEqual(invoice.status, "Paid")
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

        self.assertEqual(len(get_invoice_payments(invoice.id)), 2)
        self.assert_invariants()


class DeleteInvoiceTests(InvoiceFixtureMixin, TestCase):
    def test_delete_reverses_stock_in_original_warehouse(self):
        self.stock(self.annex, 50)
        invoice = self.make_invoice()
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("40.000"))

        result = delete_invoice(invoice.id)

        reversal = StockMovement.objects.get(movement_type="ADJUSTMENT", reference_docno=result["invoice_no"])
        self.assertEqual(reversal.warehouse_id, self.annex.id)
        self.assertEqual(reversal.quantity, Decimal("10.000"))
        self.assertEqual(reversal.reference_doctype, "INVOICE_DELETE")
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("50.000"))

        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(CustomerLedgerEntry.objects.filter(transaction_type="INVOICE").exists())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assert_invariants()

    def test_delete_reverses_repeated_item_into_each_line_warehouse(self):
        self.stock(self.main, 20)
        self.stock(self.annex, 30)
        invoice = create_invoice(
            customer_id=self.customer.id,
            invoice_date=self.today,
            items=[
                {"item_id": self.item.id, "quantity": "2", "unit_price": "10", "warehouse_id": self.main.id},
                {"item_id": self.item.id, "quantity": "3", "unit_price": "10", "warehouse_id": self.annex.id},
            ],
        )
        self.assertEqual(get_balance(self.item.id, self.main.id), Decimal("18.000"))
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("27.000"))

        result = delete_invoice(invoice.id)

        reversals = dict(
            StockMovement.objects.filter(
                movement_type="ADJUSTMENT", reference_docno=result["invoice_no"]
            ).values_list("warehouse_id", "quantity")
        )
        self.assertEqual(reversals, {self.main.id: Decimal("2.000"), self.annex.id: Decimal("3.000")})
        self.assertEqual(get_balance(self.item.id, self.main.id), Decimal("20.000"))
        self.assertEqual(get_balance(self.item.id, self.annex.id), Decimal("30.000"))
        self.assert_invariants()

    def test_delete_removes_fully_consumed_payments(self):
        invoice = self.make_invoice(payment={"amount": "60"})
        create_payment(
            customer_id=self.customer.id,
            amount="40",
            invoice_allocations=[{"invoice_id": invoice.id, "amount": "40"}],
        )
        self.assertEqual(Payment.objects.count(), 2)

        result = delete_invoice(invoice.id)

        self.assertEqual(len(result["deleted_payments"]), 2)
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(PaymentAllocation.objects.exists())
        self.assertFalse(CustomerLedgerEntry.objects.exists())

    def test_shared_payment_survives_and_shrinks(self):
        first = self.make_invoice()
        second = self.make_invoice(qty="5")
        payment = create_payment(
            customer_id=self.customer.id,
            amount="80",
            invoice_allocations=[
                {"invoice_id": first.id, "amount": "50"},
                {"invoice_id": second.id, "amount": "30"},
            ],
        )

        result = delete_invoice(first.id)

        self.assertEqual(result["deleted_payments"], [])
        payment.refresh_from_db()
        self.assertEqual(payment.amount, Decimal("30.00"))
        second.refresh_from_db()
        self.assertEqual(second.paid_amount, Decimal("30.00"))
        self.assertEqual(second.status, "Partially Paid")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("20.00"))
        self.assert_invariants()

    def test_unknown_invoice(self):
        with self.assertRaises(NotFoundError):
            delete_invoice(999999)


class UpdateInvoiceTests(InvoiceFixtureMixin, TestCase):
    def _update(self, invoice, **kwargs):
        kwargs.setdefault("customer_id", invoice.customer_id)
        kwargs.setdefault("items", [{"item_id": self.item.id, "quantity": 10, "unit_price": 10}])
        return update_invoice(invoice.id, **kwargs)

    def test_deleted_payment_is_removed_and_balance_restored(self):
        invoice = self.make_invoice(payment={"amount": "100"})
        payment = Payment.objects.get()

        invoice = self._update(invoice, deleted_payments=[payment.id])

        self.assertEqual(invoice.paid_amount, Decimal("0.00"))
        self.assertEqual(invoice.balance_amount, Decimal("100.00"))
        self.assertEqual(invoice.status, "Unpaid")
        self.assertFalse(CustomerLedgerEntry.objects.filter(transaction_type="PAYMENT").exists())
        self.assert_invariants()

    def test_deleted_shared_payment_recomputes_other_invoice(self):
        first = self.make_invoice()
        second = self.make_invoice()
        payment = create_payment(
            customer_id=self.customer.id,
            amount="150",
            invoice_allocations=[
                {"invoice_id": first.id, "amount": "100"},
                {"invoice_id": second.id, "amount": "50"},
            ],
        )

        self._update(first, deleted_payments=[payment.id])

        second.refresh_from_db()
        self.assertEqual(second.paid_amount, Decimal("0.00"))
        self.assertEqual(second.status, "Unpaid")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("200.00"))
        self.assert_invariants()

    def test_new_payment_on_update(self):
        invoice = self.make_invoice()
        invoice = self._update(invoice, payment={"amount": "25"})
        self.assertEqual(invoice.paid_amount, Decimal("25.00"))
        self.assertEqual(invoice.status, "Partially Paid")
        self.assert_invariants()

    def test_lines_replaced_without_stock_reconciliation(self):
        self.stock(self.main, 50)
        invoice = self.make_invoice()
        invoice = self._update(invoice, items=[{"item_id": self.item.id, "quantity": 4, "unit_price": 10}])

        self.assertEqual(invoice.total_amount, Decimal("40.00"))
        self.assertEqual(invoice.items.count(), 1)
        self.assertEqual(StockMovement.objects.filter(movement_type="SALE").count(), 1)
        self.assertEqual(get_balance(self.item.id, self.main.id), Decimal("40.000"))

    def test_customer_reassignment_updates_both(self):
        other = Customer.objects.create(customer_code="C-002", customer_name="Globex")
        invoice = self.make_invoice()

        self._update(invoice, customer_id=other.id)

        self.customer.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assertEqual(other.current_balance, Decimal("100.00"))

    def test_requested_status_stands_while_nothing_is_paid(self):
        invoice = self.make_invoice()
        invoice = self._update(invoice, status="Cancelled")
        self.assertEqual(invoice.status, "Cancelled")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

    def test_payment_on_update_overrides_requested_status(self):
        invoice = self.make_invoice()
        invoice = self._update(invoice, status="Draft", payment={"amount": "100"})
        self.assertEqual(invoice.status, "Paid")
        self.assert_invariants()

    def test_fully_paid_draft_becomes_paid(self):
        invoice = self.make_invoice(status="Draft")
        self.assertEqual(invoice.status, "Draft")

        create_payment(
            customer_id=self.customer.id,
            amount="100.00",
            invoice_allocations=[{"invoice_id": invoice.id, "amount": "100.00"}],
        )

        invoice.refresh_from_db()
        self.assertEqual(invoice.balance_amount, Decimal("0.00"))
        self.assertEqual(invoice.status, "Paid")
        self.assert_invariants()

    def test_invoice_number_is_fixed(self):
        invoice = self.make_invoice()
        with self.assertRaises(ERPValidationError):
            self._update(invoice, invoice_no="INV-OTHER")
