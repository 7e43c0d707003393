# purchases/serializers.py

from rest_framework import serializers

from purchases.models import GoodsReceipt, GoodsReceiptItem, Purchase, PurchaseOrder, PurchaseOrderItem


class PurchaseSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    item_name = serializers.CharField(source="item.item_name", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.warehouse_code", read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "purchase_no",
            "item",
            "item_code",
            "item_name",
            "warehouse",
            "warehouse_code",
            "quantity",
            "unit_cost",
            "total_cost",
            "supplier_name",
            "purchase_date",
            "invoice_no",
            "remarks",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class PurchaseInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    warehouse_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_cost = serializers.DecimalField(max_digits=15, decimal_places=2)
    supplier_name = serializers.CharField(required=False, allow_blank=True, default="")
    purchase_date = serializers.DateField(required=False)
    invoice_no = serializers.CharField(required=False, allow_blank=True, default="")
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    pending_quantity = serializers.DecimalField(max_digits=15, decimal_places=3, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = ["id", "item", "item_code", "quantity", "received_quantity", "pending_quantity", "unit_price", "amount"]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "po_no",
            "supplier_name",
            "po_date",
            "expected_delivery_date",
            "status",
            "total_amount",
            "warehouse",
            "notes",
            "items",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class GoodsReceiptItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsReceiptItem
        fields = ["id", "po_item", "item", "received_quantity"]
        read_only_fields = fields


class GoodsReceiptSerializer(serializers.ModelSerializer):
    po_no = serializers.CharField(source="purchase_order.po_no", read_only=True)
    items = GoodsReceiptItemSerializer(many=True, read_only=True)

    class Meta:
        model = GoodsReceipt
        fields = [
            "id",
            "receipt_no",
            "purchase_order",
            "po_no",
            "warehouse",
            "receipt_date",
            "remarks",
            "items",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, default=0)


class PurchaseOrderInputSerializer(serializers.Serializer):
    supplier_name = serializers.CharField(required=False, allow_blank=True, default="")
    po_date = serializers.DateField(required=False)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=[PurchaseOrder.Status.DRAFT, PurchaseOrder.Status.SUBMITTED],
        required=False,
        default=PurchaseOrder.Status.DRAFT,
    )
    warehouse_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = OrderLineSerializer(many=True, allow_empty=False)


class PurchaseOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.Status.choices)


class ReceiptLineSerializer(serializers.Serializer):
    po_item_id = serializers.IntegerField()
    received_quantity = serializers.DecimalField(max_digits=15, decimal_places=3)


class GoodsReceiptInputSerializer(serializers.Serializer):
    warehouse_id = serializers.IntegerField()
    receipt_date = serializers.DateField(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    items = ReceiptLineSerializer(many=True, allow_empty=False)
