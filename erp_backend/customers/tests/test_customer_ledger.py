# customers/tests/test_customer_ledger.py

from datetime import date
from decimal import Decimal

from django.test import TestCase

from core.exceptions import ERPValidationError, NotFoundError
from customers.models import Customer, CustomerLedgerEntry
from customers.services.customer_ledger import (
    create_customer,
    create_ledger_entry,
    delete_ledger_entries,
    get_customer_statement,
    update_customer_balance,
)


class CustomerLedgerTests(TestCase):
    """
    GUARANTEES:
    - Running balance = previous balance + debit - credit (per customer)
    - Stored balances are not rewritten by later (back-dated) inserts
    - Opening balance is posted once as OPENING_BALANCE
    """

    def setUp(self):
        self.customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        self.other = Customer.objects.create(customer_code="C-002", customer_name="Globex")

    def test_running_balance_accumulates(self):
        e1 = create_ledger_entry(
            customer_id=self.customer.id, transaction_type="INVOICE", reference_no="INV-1", debit="100.00"
        )
        e2 = create_ledger_entry(
            customer_id=self.customer.id, transaction_type="PAYMENT", reference_no="PAY-1", credit="60.00"
        )
        self.assertEqual(e1.balance, Decimal("100.00"))
        self.assertEqual(e2.balance, Decimal("40.00"))

    def test_running_balance_is_per_customer(self):
        create_ledger_entry(customer_id=self.customer.id, transaction_type="INVOICE", reference_no="INV-1", debit=100)
        e = create_ledger_entry(customer_id=self.other.id, transaction_type="INVOICE", reference_no="INV-2", debit=5)
        self.assertEqual(e.balance, Decimal("5.00"))

    def test_back_dated_entry_does_not_rewrite_history(self):
        first = create_ledger_entry(
            customer_id=self.customer.id,
            transaction_type="INVOICE",
            reference_no="INV-1",
            debit=100,
            transaction_date=date(2026, 3, 1),
        )
        create_ledger_entry(
            customer_id=self.customer.id,
            transaction_type="INVOICE",
            reference_no="INV-0",
            debit=50,
            transaction_date=date(2026, 1, 1),
        )
        first.refresh_from_db()
        self.assertEqual(first.balance, Decimal("100.00"))

    def test_invalid_type_rejected(self):
        with self.assertRaises(ERPValidationError):
            create_ledger_entry(customer_id=self.customer.id, transaction_type="REFUND", reference_no="X", debit=1)

    def test_delete_by_reference(self):
        create_ledger_entry(customer_id=self.customer.id, transaction_type="PAYMENT", reference_no="PAY-9", credit=5)
        self.assertEqual(delete_ledger_entries(reference_no="PAY-9", transaction_type="PAYMENT"), 1)
        self.assertFalse(CustomerLedgerEntry.objects.filter(reference_no="PAY-9").exists())

    def test_update_balance_without_invoices_is_zero(self):
        Customer.objects.filter(id=self.customer.id).update(current_balance=Decimal("77.00"))
        self.assertEqual(update_customer_balance(self.customer.id), Decimal("0.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))


class CustomerOnboardingTests(TestCase):
    def test_positive_opening_balance_is_debit(self):
        customer = create_customer(customer_code="C-100", customer_name="Initech", opening_balance="250.00")
        entry = CustomerLedgerEntry.objects.get(customer=customer)
        self.assertEqual(entry.transaction_type, "OPENING_BALANCE")
        self.assertEqual(entry.debit, Decimal("250.00"))
        self.assertEqual(entry.credit, Decimal("0.00"))
        self.assertEqual(entry.balance, Decimal("250.00"))

    def test_negative_opening_balance_is_credit(self):
        customer = create_customer(customer_code="C-101", customer_name="Hooli", opening_balance="-40")
        entry = CustomerLedgerEntry.objects.get(customer=customer)
        self.assertEqual(entry.credit, Decimal("40.00"))
        self.assertEqual(entry.balance, Decimal("-40.00"))

    def test_zero_opening_balance_writes_no_entry(self):
        customer = create_customer(customer_code="C-102", customer_name="Umbrella")
        self.assertFalse(CustomerLedgerEntry.objects.filter(customer=customer).exists())

    def test_duplicate_code_rejected(self):
        create_customer(customer_code="C-103", customer_name="Soylent")
        with self.assertRaises(ERPValidationError):
            create_customer(customer_code="C-103", customer_name="Soylent Again")


class CustomerStatementTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(customer_code="C-200", customer_name="Wayne")
        create_ledger_entry(
            customer_id=self.customer.id, transaction_type="INVOICE", reference_no="INV-1",
            debit=100, transaction_date=date(2026, 1, 10),
        )
        create_ledger_entry(
            customer_id=self.customer.id, transaction_type="PAYMENT", reference_no="PAY-1",
            credit=30, transaction_date=date(2026, 2, 5),
        )
        create_ledger_entry(
            customer_id=self.customer.id, transaction_type="INVOICE", reference_no="INV-2",
            debit=20, transaction_date=date(2026, 2, 20),
        )

    def test_opening_balance_before_window(self):
        stmt = get_customer_statement(self.customer.id, date_from=date(2026, 2, 1))
        self.assertEqual(stmt["opening_balance"], Decimal("100.00"))
        self.assertEqual([r["reference_no"] for r in stmt["entries"]], ["PAY-1", "INV-2"])
        self.assertEqual([r["running_balance"] for r in stmt["entries"]], [Decimal("70.00"), Decimal("90.00")])
        self.assertEqual(stmt["closing_balance"], Decimal("90.00"))

    def test_window_end_is_inclusive(self):
        stmt = get_customer_statement(self.customer.id, date_to=date(2026, 2, 5))
        self.assertEqual(stmt["opening_balance"], Decimal("0.00"))
        self.assertEqual(stmt["total_debit"], Decimal("100.00"))
        self.assertEqual(stmt["total_credit"], Decimal("30.00"))
        self.assertEqual(stmt["closing_balance"], Decimal("70.00"))

    def test_unknown_customer(self):
        with self.assertRaises(NotFoundError):
            get_customer_statement(999999)
