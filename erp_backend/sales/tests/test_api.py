# sales/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from customers.models import Customer
from inventory.models import Item, Warehouse
from inventory.services.stock_ledger import record_movement
from sales.models import Invoice, Payment

User = get_user_model()


class SalesApiTests(APITestCase):
    def setUp(self):
        self.clerk = User.objects.create_user(email="sales@erp.test", password="pass12345", role=User.ROLE_SALES)
        self.accountant = User.objects.create_user(
            email="acct@erp.test", password="pass12345", role=User.ROLE_ACCOUNTANT
        )
        self.client.force_authenticate(self.clerk)

        self.customer = Customer.objects.create(customer_code="C-001", customer_name="Acme")
        self.item = Item.objects.create(item_code="FG-001", item_name="Bread")
        self.wh = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")
        record_movement(item_id=self.item.id, warehouse_id=self.wh.id, movement_type="PURCHASE", quantity=20)

    def _create_invoice(self, **extra):
        body = {
            "customer_id": self.customer.id,
            "invoice_date": str(timezone.localdate()),
            "items": [{"item_id": self.item.id, "quantity": "10", "unit_price": "10.00"}],
        }
        body.update(extra)
        return self.client.post("/api/sales/invoices/", body, format="json")

    def test_create_invoice(self):
        res = self._create_invoice()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "Unpaid")
        self.assertEqual(Decimal(res.data["balance_amount"]), Decimal("100.00"))
        self.assertEqual(len(res.data["items"]), 1)

    def test_create_invoice_with_payment(self):
        res = self._create_invoice(payment={"amount": "100.00", "payment_method": "Cash"})
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "Paid")

        payments = self.client.get(f"/api/sales/invoices/{res.data['id']}/payments/")
        self.assertEqual(payments.status_code, status.HTTP_200_OK)
        self.assertEqual(len(payments.data), 1)

    def test_missing_items_is_400(self):
        res = self._create_invoice(items=[])
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Invoice.objects.exists())

    def test_unknown_customer_is_404(self):
        res = self._create_invoice(customer_id=999999)
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_payment_mismatch_is_400(self):
        invoice_id = self._create_invoice().data["id"]
        res = self.client.post(
            "/api/sales/payments/",
            {
                "customer_id": self.customer.id,
                "amount": "50.00",
                "invoice_allocations": [{"invoice_id": invoice_id, "amount": "40.00"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payment.objects.exists())

    def test_payment_create_and_patch(self):
        invoice_id = self._create_invoice().data["id"]
        res = self.client.post(
            "/api/sales/payments/",
            {
                "customer_id": self.customer.id,
                "amount": "40.00",
                "invoice_allocations": [{"invoice_id": invoice_id, "amount": "40.00"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        patched = self.client.patch(f"/api/sales/payments/{res.data['id']}/", {"notes": "thanks"}, format="json")
        self.assertEqual(patched.status_code, status.HTTP_200_OK)
        self.assertEqual(patched.data["notes"], "thanks")

    def test_delete_requires_accountant(self):
        invoice_id = self._create_invoice().data["id"]

        res = self.client.delete(f"/api/sales/invoices/{invoice_id}/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.accountant)
        res = self.client.delete(f"/api/sales/invoices/{invoice_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(Invoice.objects.exists())

    def test_direct_sale_insufficient_stock_is_409(self):
        res = self.client.post(
            "/api/sales/direct-sales/",
            {"item_id": self.item.id, "warehouse_id": self.wh.id, "quantity": "25", "unit_price": "1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["available"], "20.000")

    def test_filter_invoices_by_status(self):
        self._create_invoice()
        self._create_invoice(payment={"amount": "100.00"})
        res = self.client.get("/api/sales/invoices/", {"status": "Paid"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
