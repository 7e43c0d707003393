# activity/models.py

"""
ACTIVITY LOG (AUDIT TRAIL)

Purely observational:
- Never read by business logic.
- Losing queued rows on a crash does not affect ledger correctness.
"""

from django.conf import settings
from django.db import models


class ActivityLog(models.Model):
    class Action(models.TextChoices):
        LOGIN = "LOGIN", "Login"
        ITEM_CREATE = "ITEM_CREATE", "Item Created"
        WAREHOUSE_CREATE = "WAREHOUSE_CREATE", "Warehouse Created"
        STOCK_MOVEMENT = "STOCK_MOVEMENT", "Stock Movement"
        PURCHASE_CREATE = "PURCHASE_CREATE", "Purchase Recorded"
        PURCHASE_DELETE = "PURCHASE_DELETE", "Purchase Deleted"
        PURCHASE_ORDER_CREATE = "PURCHASE_ORDER_CREATE", "Purchase Order Created"
        PURCHASE_ORDER_UPDATE = "PURCHASE_ORDER_UPDATE", "Purchase Order Updated"
        PURCHASE_ORDER_DELETE = "PURCHASE_ORDER_DELETE", "Purchase Order Deleted"
        GOODS_RECEIPT_CREATE = "GOODS_RECEIPT_CREATE", "Goods Received"
        SALE_CREATE = "SALE_CREATE", "Direct Sale Recorded"
        SALE_DELETE = "SALE_DELETE", "Direct Sale Deleted"
        PRODUCTION_CREATE = "PRODUCTION_CREATE", "Production Recorded"
        PRODUCTION_DELETE = "PRODUCTION_DELETE", "Production Deleted"
        CUSTOMER_CREATE = "CUSTOMER_CREATE", "Customer Created"
        INVOICE_CREATE = "INVOICE_CREATE", "Invoice Created"
        INVOICE_UPDATE = "INVOICE_UPDATE", "Invoice Updated"
        INVOICE_DELETE = "INVOICE_DELETE", "Invoice Deleted"
        PAYMENT_CREATE = "PAYMENT_CREATE", "Payment Created"
        PAYMENT_UPDATE = "PAYMENT_UPDATE", "Payment Updated"
        PAYMENT_DELETE = "PAYMENT_DELETE", "Payment Deleted"
        REPAIR_RUN = "REPAIR_RUN", "Consistency Repair"

    class Level(models.TextChoices):
        INFO = "INFO", "Info"
        WARNING = "WARNING", "Warning"
        ERROR = "ERROR", "Error"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )

    action = models.CharField(max_length=40, choices=Action.choices)
    entity_type = models.CharField(max_length=40)
    entity_id = models.CharField(max_length=64, blank=True, default="")
    description = models.TextField(blank=True, default="")
    log_level = models.CharField(max_length=10, choices=Level.choices, default=Level.INFO)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    duration_ms = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="activity_entity_idx"),
            models.Index(fields=["action", "created_at"], name="activity_action_created_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"
