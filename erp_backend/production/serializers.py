# production/serializers.py

from rest_framework import serializers

from production.models import Production, ProductionInput


class ProductionInputSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)

    class Meta:
        model = ProductionInput
        fields = ["id", "item", "item_code", "quantity", "warehouse"]
        read_only_fields = fields


class ProductionSerializer(serializers.ModelSerializer):
    output_item_code = serializers.CharField(source="output_item.item_code", read_only=True)
    inputs = ProductionInputSerializer(many=True, read_only=True)

    class Meta:
        model = Production
        fields = [
            "id",
            "production_no",
            "output_item",
            "output_item_code",
            "output_quantity",
            "warehouse",
            "raw_materials_warehouse",
            "production_date",
            "remarks",
            "inputs",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class InputLineSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)


class ProductionInputPayloadSerializer(serializers.Serializer):
    output_item_id = serializers.IntegerField()
    output_quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    warehouse_id = serializers.IntegerField()
    raw_materials_warehouse_id = serializers.IntegerField(required=False, allow_null=True)
    production_date = serializers.DateField(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    input_items = InputLineSerializer(many=True, allow_empty=False)
