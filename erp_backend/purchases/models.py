# purchases/models.py

"""
PURCHASES

Purchase: one item into one warehouse. The stock effect is the PURCHASE
movement referencing purchase_no; this row is the commercial document.

PurchaseOrder -> GoodsReceipt: the order carries ordered and received
quantities per line; each receipt posts PURCHASE movements referencing
receipt_no.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Purchase(models.Model):
    purchase_no = models.CharField(max_length=30, unique=True)

    item = models.ForeignKey(
        "inventory.Item",
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="purchases",
    )

    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    total_cost = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    supplier_name = models.CharField(max_length=255, blank=True, default="")
    purchase_date = models.DateField(default=timezone.localdate)
    invoice_no = models.CharField(max_length=50, blank=True, default="")
    remarks = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-purchase_date", "-id"]
        indexes = [
            models.Index(fields=["purchase_date"], name="purch_date_idx"),
            models.Index(fields=["supplier_name"], name="purch_supplier_idx"),
        ]

    def __str__(self):
        return f"{self.purchase_no} | {self.item_id} x {self.quantity}"


class PurchaseOrder(models.Model):
    """
    Ordered quantities only. Stock moves when goods are received against
    the order (GoodsReceipt), never on the order itself.
    """

    class Status(models.TextChoices):
        DRAFT = "Draft", "Draft"
        SUBMITTED = "Submitted", "Submitted"
        PARTIALLY_RECEIVED = "Partially Received", "Partially Received"
        COMPLETED = "Completed", "Completed"
        CANCELLED = "Cancelled", "Cancelled"

    po_no = models.CharField(max_length=30, unique=True)
    supplier_name = models.CharField(max_length=255, blank=True, default="")
    po_date = models.DateField(default=timezone.localdate)
    expected_delivery_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    total_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_orders",
    )
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-po_date", "-id"]
        indexes = [
            models.Index(fields=["status"], name="po_status_idx"),
        ]

    def __str__(self):
        return f"{self.po_no} | {self.status}"


class PurchaseOrderItem(models.Model):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")
    item = models.ForeignKey("inventory.Item", on_delete=models.PROTECT, related_name="purchase_order_items")
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    received_quantity = models.DecimalField(max_digits=15, decimal_places=3, default=Decimal("0.000"))
    unit_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]

    @property
    def pending_quantity(self) -> Decimal:
        return self.quantity - self.received_quantity

    def __str__(self):
        return f"{self.purchase_order_id} | {self.item_id} x {self.quantity}"


class GoodsReceipt(models.Model):
    receipt_no = models.CharField(max_length=30, unique=True)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, related_name="receipts")
    warehouse = models.ForeignKey(
        "inventory.Warehouse",
        on_delete=models.PROTECT,
        related_name="goods_receipts",
    )
    receipt_date = models.DateField(default=timezone.localdate)
    remarks = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="goods_receipts",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-receipt_date", "-id"]

    def __str__(self):
        return f"{self.receipt_no} | {self.purchase_order_id}"


class GoodsReceiptItem(models.Model):
    receipt = models.ForeignKey(GoodsReceipt, on_delete=models.CASCADE, related_name="items")
    po_item = models.ForeignKey(PurchaseOrderItem, on_delete=models.PROTECT, related_name="receipt_lines")
    item = models.ForeignKey("inventory.Item", on_delete=models.PROTECT, related_name="goods_receipt_items")
    received_quantity = models.DecimalField(max_digits=15, decimal_places=3)

    class Meta:
        ordering = ["id"]
