# inventory/serializers.py

from rest_framework import serializers

from inventory.models import Item, StockBalance, StockMovement, Warehouse


class ItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = Item
        fields = [
            "id",
            "item_code",
            "item_name",
            "description",
            "category",
            "unit_of_measure",
            "standard_cost",
            "selling_price",
            "reorder_level",
            "current_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "current_stock", "created_at", "updated_at"]


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ["id", "warehouse_code", "warehouse_name", "location", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]


class StockMovementSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    item_name = serializers.CharField(source="item.item_name", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.warehouse_code", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "movement_no",
            "item",
            "item_code",
            "item_name",
            "warehouse",
            "warehouse_code",
            "movement_type",
            "quantity",
            "unit_cost",
            "reference_doctype",
            "reference_docno",
            "remarks",
            "movement_date",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class StockBalanceSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.warehouse_code", read_only=True)

    class Meta:
        model = StockBalance
        fields = ["id", "item", "item_code", "warehouse", "warehouse_code", "quantity", "last_updated"]
        read_only_fields = fields


class StockAdjustmentInputSerializer(serializers.Serializer):
    """
    Manual adjustment input.
    quantity is signed: positive adds stock, negative removes it.
    """

    item_id = serializers.IntegerField()
    warehouse_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_cost = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
