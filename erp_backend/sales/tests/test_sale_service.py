# sales/tests/test_sale_service.py

from decimal import Decimal

from django.test import TestCase

from activity.models import ActivityLog
from core.exceptions import ERPValidationError, InsufficientStockError, NotFoundError
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.stock_ledger import get_balance, record_movement
from sales.models import Sale
from sales.services.sale_service import delete_sale, record_sale


class DirectSaleTests(TestCase):
    def setUp(self):
        self.item = Item.objects.create(item_code="FG-001", item_name="Bread")
        self.wh = Warehouse.objects.create(warehouse_code="WH-001", warehouse_name="Main")
        record_movement(item_id=self.item.id, warehouse_id=self.wh.id, movement_type="PURCHASE", quantity=5)

    def test_sale_deducts_stock_and_audits(self):
        sale = record_sale(
            item_id=self.item.id,
            warehouse_id=self.wh.id,
            quantity=2,
            unit_price="7.50",
            customer_name="Walk-in",
        )

        self.assertTrue(sale.sale_no.startswith("SALE-"))
        self.assertEqual(sale.total_amount, Decimal("15.00"))
        self.assertEqual(get_balance(self.item.id, self.wh.id), Decimal("3.000"))

        movement = StockMovement.objects.get(movement_type="SALE")
        self.assertEqual(movement.reference_docno, sale.sale_no)
        self.assertEqual(movement.remarks, f"Sale: {sale.sale_no} to Walk-in")
        self.assertTrue(ActivityLog.objects.filter(action="SALE_CREATE", entity_id=str(sale.id)).exists())

    def test_insufficient_stock_blocks(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            record_sale(item_id=self.item.id, warehouse_id=self.wh.id, quantity=6, unit_price=1)

        self.assertEqual(ctx.exception.available, Decimal("5.000"))
        self.assertEqual(ctx.exception.required, Decimal("6.000"))
        self.assertIn("Available: 5.000, Required: 6.000", ctx.exception.message)
        self.assertFalse(Sale.objects.exists())
        self.assertEqual(StockMovement.objects.filter(movement_type="SALE").count(), 0)

    def test_quantity_must_be_positive(self):
        with self.assertRaises(ERPValidationError):
            record_sale(item_id=self.item.id, warehouse_id=self.wh.id, quantity=0, unit_price=1)

    def test_delete_removes_document_and_keeps_movement(self):
        sale = record_sale(item_id=self.item.id, warehouse_id=self.wh.id, quantity=2, unit_price=1)

        self.assertEqual(delete_sale(sale.id), sale.sale_no)

        self.assertFalse(Sale.objects.filter(id=sale.id).exists())
        self.assertTrue(StockMovement.objects.filter(reference_docno=sale.sale_no).exists())
        self.assertEqual(get_balance(self.item.id, self.wh.id), Decimal("3.000"))
        self.assertTrue(ActivityLog.objects.filter(action="SALE_DELETE", entity_id=str(sale.id)).exists())

    def test_delete_unknown_sale(self):
        with self.assertRaises(NotFoundError):
            delete_sale(999999)
