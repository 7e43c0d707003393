# sales/tests/test_payment_service.py

from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from core.exceptions import ERPValidationError, NotFoundError
from customers.models import Customer, CustomerLedgerEntry
from inventory.models import Item, Warehouse
from sales.models import Payment, PaymentAllocation
from sales.services.invoice_service import create_invoice
from sales.services.payment_service import create_payment, delete_payment, update_payment


class PaymentServiceTests(TestCase):
    """
    GUARANTEES:
    - SUM(allocations) == amount within 0.01, else nothing is written
    - Every target invoice belongs to the paying customer
    - Invoice and customer balances are recomputed after every change
    """

    def setUp(self):
        self.customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        self.other = Customer.objects.create(customer_code="C-002", customer_name="Globex")
        self.item = Item.objects.create(item_code="FG-001", item_name="Bread")
        Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")
        self.inv1 = self._invoice(self.customer, "100")
        self.inv2 = self._invoice(self.customer, "50")

    def _invoice(self, customer, price):
        return create_invoice(
            customer_id=customer.id,
            invoice_date=timezone.localdate(),
            items=[{"item_id": self.item.id, "quantity": 1, "unit_price": price}],
        )

    def test_multi_invoice_payment(self):
        payment = create_payment(
            customer_id=self.customer.id,
            amount="120",
            invoice_allocations=[
                {"invoice_id": self.inv1.id, "amount": "100"},
                {"invoice_id": self.inv2.id, "amount": "20"},
            ],
            payment_method="Bank Transfer",
        )

        self.inv1.refresh_from_db()
        self.inv2.refresh_from_db()
        self.assertEqual(self.inv1.status, "Paid")
        self.assertEqual(self.inv2.status, "Partially Paid")
        self.assertEqual(self.inv2.balance_amount, Decimal("30.00"))

        entry = CustomerLedgerEntry.objects.get(reference_no=payment.payment_no)
        self.assertEqual(entry.credit, Decimal("120.00"))
        self.assertEqual(
            entry.description, f"Payment against {self.inv1.invoice_no}, {self.inv2.invoice_no}"
        )
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("30.00"))

    def test_allocation_mismatch_rejected_without_writes(self):
        with self.assertRaises(ERPValidationError):
            create_payment(
                customer_id=self.customer.id,
                amount="100",
                invoice_allocations=[{"invoice_id": self.inv1.id, "amount": "90"}],
            )
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(CustomerLedgerEntry.objects.filter(transaction_type="PAYMENT").exists())

    def test_within_tolerance_accepted(self):
        payment = create_payment(
            customer_id=self.customer.id,
            amount="50.01",
            invoice_allocations=[{"invoice_id": self.inv2.id, "amount": "50.00"}],
        )
        self.assertEqual(payment.amount, Decimal("50.01"))

    def test_foreign_invoice_rejected(self):
        with self.assertRaises(ERPValidationError):
            create_payment(
                customer_id=self.other.id,
                amount="10",
                invoice_allocations=[{"invoice_id": self.inv1.id, "amount": "10"}],
            )

    def test_unknown_invoice(self):
        with self.assertRaises(NotFoundError):
            create_payment(
                customer_id=self.customer.id,
                amount="10",
                invoice_allocations=[{"invoice_id": 999999, "amount": "10"}],
            )

    def test_non_positive_amount_rejected(self):
        with self.assertRaises(ERPValidationError):
            create_payment(
                customer_id=self.customer.id,
                amount="0",
                invoice_allocations=[{"invoice_id": self.inv1.id, "amount": "0"}],
            )

    def test_update_only_touches_metadata(self):
        payment = create_payment(
            customer_id=self.customer.id,
            amount="10",
            invoice_allocations=[{"invoice_id": self.inv1.id, "amount": "10"}],
        )
        updated = update_payment(payment.id, reference_no="CHQ-7", notes="cleared")
        self.assertEqual(updated.reference_no, "CHQ-7")

        with self.assertRaises(ERPValidationError):
            update_payment(payment.id, amount="99")

    def test_delete_payment_restores_balances(self):
        payment = create_payment(
            customer_id=self.customer.id,
            amount="150",
            invoice_allocations=[
                {"invoice_id": self.inv1.id, "amount": "100"},
                {"invoice_id": self.inv2.id, "amount": "50"},
            ],
        )

        result = delete_payment(payment.id)

        self.assertEqual(sorted(result["invoice_ids"]), sorted([self.inv1.id, self.inv2.id]))
        self.assertFalse(PaymentAllocation.objects.exists())
        self.assertFalse(CustomerLedgerEntry.objects.filter(reference_no=payment.payment_no).exists())
        self.inv1.refresh_from_db()
        self.assertEqual(self.inv1.status, "Unpaid")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("150.00"))
