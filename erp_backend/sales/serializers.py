# sales/serializers.py

"""
Read serializers mirror the models; *Input serializers only shape and
type-check request bodies. Business rules live in sales.services.
"""

from rest_framework import serializers

from sales.models import Invoice, InvoiceItem, Payment, PaymentAllocation, Sale


class InvoiceItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    item_name = serializers.CharField(source="item.item_name", read_only=True)

    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "item",
            "item_code",
            "item_name",
            "warehouse",
            "quantity",
            "unit_price",
            "amount",
            "tax_rate",
            "discount_type",
            "discount_value",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.customer_name", read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_no",
            "customer",
            "customer_name",
            "invoice_date",
            "due_date",
            "status",
            "total_amount",
            "paid_amount",
            "balance_amount",
            "discount_scope",
            "discount_type",
            "discount_value",
            "notes",
            "terms",
            "items",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InvoiceLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    warehouse_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2)
    tax_rate = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, default=0)
    discount_type = serializers.CharField(required=False, default="percentage")
    discount_value = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, default=0)


class ImmediatePaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    reference_no = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class InvoiceInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    invoice_no = serializers.CharField(required=False, allow_blank=True)
    invoice_date = serializers.DateField()
    due_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Invoice.Status.choices, required=False, allow_blank=True)
    discount_scope = serializers.ChoiceField(choices=Invoice.DiscountScope.choices, required=False)
    discount_type = serializers.ChoiceField(choices=Invoice.DiscountType.choices, required=False)
    discount_value = serializers.DecimalField(max_digits=15, decimal_places=2, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    terms = serializers.CharField(required=False, allow_blank=True)
    total_amount = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, allow_null=True)
    items = InvoiceLineInputSerializer(many=True, allow_empty=False)
    payment = ImmediatePaymentInputSerializer(required=False, allow_null=True)


class InvoiceUpdateInputSerializer(InvoiceInputSerializer):
    deleted_payments = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class AllocationSerializer(serializers.ModelSerializer):
    invoice_no = serializers.CharField(source="invoice.invoice_no", read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = ["id", "invoice", "invoice_no", "amount", "created_at"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.customer_name", read_only=True)
    allocations = AllocationSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "payment_no",
            "customer",
            "customer_name",
            "payment_date",
            "amount",
            "payment_method",
            "reference_no",
            "notes",
            "allocations",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class AllocationInputSerializer(serializers.Serializer):
    invoice_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)


class PaymentInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False, default=Payment.METHOD_CASH)
    reference_no = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    invoice_allocations = AllocationInputSerializer(many=True, allow_empty=False)


class PaymentUpdateInputSerializer(serializers.Serializer):
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    reference_no = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class InvoicePaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    payment_no = serializers.CharField()
    payment_date = serializers.DateField()
    payment_method = serializers.CharField()
    reference_no = serializers.CharField()
    notes = serializers.CharField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)


class SaleSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.item_code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.warehouse_code", read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_no",
            "item",
            "item_code",
            "warehouse",
            "warehouse_code",
            "quantity",
            "unit_price",
            "total_amount",
            "customer_name",
            "sale_date",
            "invoice_no",
            "remarks",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class SaleInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    warehouse_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    sale_date = serializers.DateField(required=False)
    invoice_no = serializers.CharField(required=False, allow_blank=True, default="")
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
