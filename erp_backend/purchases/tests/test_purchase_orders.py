# purchases/tests/test_purchase_orders.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from activity.models import ActivityLog
from core.exceptions import ERPValidationError, NotFoundError
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.stock_ledger import get_balance
from purchases.models import GoodsReceipt, PurchaseOrder
from purchases.services.purchase_order_service import (
    create_purchase_order,
    delete_purchase_order,
    record_goods_receipt,
    update_purchase_order_status,
)

User = get_user_model()


class PurchaseOrderFlowTests(TestCase):
    def setUp(self):
        self.flour = Item.objects.create(item_code="RM-001", item_name="Flour")
        self.sugar = Item.objects.create(item_code="RM-002", item_name="Sugar")
        self.wh = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")

    def make_po(self, status="Submitted"):
        return create_purchase_order(
            supplier_name="Mill Co",
            status=status,
            items=[
                {"item_id": self.flour.id, "quantity": "10", "unit_price": "2.50"},
                {"item_id": self.sugar.id, "quantity": "4", "unit_price": "1.00"},
            ],
        )

    def lines(self, po):
        flour_line = po.items.get(item=self.flour)
        sugar_line = po.items.get(item=self.sugar)
        return flour_line, sugar_line

    def test_create_has_no_stock_effect(self):
        po = self.make_po(status="Draft")

        self.assertTrue(po.po_no.startswith("PO-"))
        self.assertEqual(po.status, "Draft")
        self.assertEqual(po.total_amount, Decimal("29.00"))
        self.assertFalse(StockMovement.objects.exists())
        self.assertTrue(ActivityLog.objects.filter(action="PURCHASE_ORDER_CREATE").exists())

    def test_partial_then_full_receipt(self):
        po = self.make_po()
        flour_line, sugar_line = self.lines(po)

        first = record_goods_receipt(
            purchase_order_id=po.id,
            warehouse_id=self.wh.id,
            items=[{"po_item_id": flour_line.id, "received_quantity": "6"}],
        )
        self.assertTrue(first.receipt_no.startswith("GR-"))
        po.refresh_from_db()
        flour_line.refresh_from_db()
        self.assertEqual(po.status, "Partially Received")
        self.assertEqual(flour_line.received_quantity, Decimal("6.000"))
        self.assertEqual(flour_line.pending_quantity, Decimal("4.000"))
        self.assertEqual(get_balance(self.flour.id, self.wh.id), Decimal("6.000"))

        movement = StockMovement.objects.get(reference_docno=first.receipt_no)
        self.assertEqual(movement.movement_type, "PURCHASE")
        self.assertEqual(movement.reference_doctype, "GOODS_RECEIPT")
        self.assertEqual(movement.unit_cost, Decimal("2.50"))
        self.assertEqual(movement.remarks, f"Receipt {first.receipt_no} against PO {po.po_no}")

        record_goods_receipt(
            purchase_order_id=po.id,
            warehouse_id=self.wh.id,
            items=[
                {"po_item_id": flour_line.id, "received_quantity": "4"},
                {"po_item_id": sugar_line.id, "received_quantity": "4"},
            ],
        )
        po.refresh_from_db()
        self.assertEqual(po.status, "Completed")
        self.assertEqual(get_balance(self.flour.id, self.wh.id), Decimal("10.000"))
        self.assertEqual(get_balance(self.sugar.id, self.wh.id), Decimal("4.000"))

        self.flour.refresh_from_db()
        self.assertEqual(self.flour.current_stock, Decimal("10.000"))
        self.assertEqual(ActivityLog.objects.filter(action="GOODS_RECEIPT_CREATE").count(), 2)

    def test_over_receipt_is_rejected_before_any_write(self):
        po = self.make_po()
        flour_line, sugar_line = self.lines(po)

        with self.assertRaises(ERPValidationError):
            record_goods_receipt(
                purchase_order_id=po.id,
                warehouse_id=self.wh.id,
                items=[
                    {"po_item_id": flour_line.id, "received_quantity": "2"},
                    {"po_item_id": sugar_line.id, "received_quantity": "5"},
                ],
            )

        flour_line.refresh_from_db()
        self.assertEqual(flour_line.received_quantity, Decimal("0.000"))
        self.assertFalse(GoodsReceipt.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_same_line_twice_counts_against_pending(self):
        po = self.make_po()
        _, sugar_line = self.lines(po)

        with self.assertRaises(ERPValidationError):
            record_goods_receipt(
                purchase_order_id=po.id,
                warehouse_id=self.wh.id,
                items=[
                    {"po_item_id": sugar_line.id, "received_quantity": "3"},
                    {"po_item_id": sugar_line.id, "received_quantity": "3"},
                ],
            )
        self.assertEqual(get_balance(self.sugar.id, self.wh.id), Decimal("0.000"))

    def test_draft_and_cancelled_orders_cannot_receive(self):
        po = self.make_po(status="Draft")
        flour_line, _ = self.lines(po)
        receipt = {"po_item_id": flour_line.id, "received_quantity": "1"}

        with self.assertRaises(ERPValidationError):
            record_goods_receipt(purchase_order_id=po.id, warehouse_id=self.wh.id, items=[receipt])

        update_purchase_order_status(po.id, "Cancelled")
        with self.assertRaises(ERPValidationError):
            record_goods_receipt(purchase_order_id=po.id, warehouse_id=self.wh.id, items=[receipt])

    def test_line_from_another_order_is_not_found(self):
        po = self.make_po()
        other = self.make_po()
        other_line, _ = self.lines(other)

        with self.assertRaises(NotFoundError):
            record_goods_receipt(
                purchase_order_id=po.id,
                warehouse_id=self.wh.id,
                items=[{"po_item_id": other_line.id, "received_quantity": "1"}],
            )

    def test_status_transitions(self):
        po = self.make_po(status="Draft")

        update_purchase_order_status(po.id, "Submitted")
        with self.assertRaises(ERPValidationError):
            update_purchase_order_status(po.id, "Completed")

        update_purchase_order_status(po.id, "Cancelled")
        with self.assertRaises(ERPValidationError):
            update_purchase_order_status(po.id, "Submitted")

    def test_only_draft_orders_can_be_deleted(self):
        submitted = self.make_po()
        with self.assertRaises(ERPValidationError):
            delete_purchase_order(submitted.id)

        draft = self.make_po(status="Draft")
        po_no = delete_purchase_order(draft.id)
        self.assertEqual(po_no, draft.po_no)
        self.assertFalse(PurchaseOrder.objects.filter(id=draft.id).exists())

    def test_order_needs_lines(self):
        with self.assertRaises(ERPValidationError):
            create_purchase_order(items=[])


class PurchaseOrderApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="store@erp.test", password="pass12345", role=User.ROLE_STOREKEEPER)
        self.client.force_authenticate(self.user)
        self.item = Item.objects.create(item_code="RM-001", item_name="Flour")
        self.wh = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")

    def test_create_submit_and_receive(self):
        res = self.client.post(
            "/api/purchases/orders/",
            {"items": [{"item_id": self.item.id, "quantity": "5", "unit_price": "3.00"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        po_id = res.data["id"]
        line_id = res.data["items"][0]["id"]

        res = self.client.post(f"/api/purchases/orders/{po_id}/status/", {"status": "Submitted"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "Submitted")

        res = self.client.post(
            f"/api/purchases/orders/{po_id}/receive/",
            {"warehouse_id": self.wh.id, "items": [{"po_item_id": line_id, "received_quantity": "5"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        detail = self.client.get(f"/api/purchases/orders/{po_id}/")
        self.assertEqual(detail.data["status"], "Completed")
        self.assertEqual(len(self.client.get(f"/api/purchases/orders/{po_id}/receipts/").data), 1)

    def test_over_receipt_returns_400(self):
        po = create_purchase_order(
            status="Submitted", items=[{"item_id": self.item.id, "quantity": "2", "unit_price": "1"}]
        )
        line = po.items.get()

        res = self.client.post(
            f"/api/purchases/orders/{po.id}/receive/",
            {"warehouse_id": self.wh.id, "items": [{"po_item_id": line.id, "received_quantity": "3"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
