# sales/admin.py

from django.contrib import admin

from sales.models import Invoice, InvoiceItem, Payment, PaymentAllocation, Sale


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = ("item", "warehouse", "quantity", "unit_price", "amount", "tax_rate", "discount_type", "discount_value")


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("invoice", "amount", "created_at")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_no", "customer", "invoice_date", "due_date", "status", "total_amount", "paid_amount", "balance_amount")
    list_filter = ("status",)
    search_fields = ("invoice_no", "customer__customer_code", "customer__customer_name")
    readonly_fields = ("status", "total_amount", "paid_amount", "balance_amount")
    inlines = [InvoiceItemInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_no", "customer", "payment_date", "amount", "payment_method")
    list_filter = ("payment_method",)
    search_fields = ("payment_no", "reference_no", "customer__customer_code")
    readonly_fields = ("amount",)
    inlines = [PaymentAllocationInline]


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("sale_no", "item", "warehouse", "quantity", "unit_price", "total_amount", "sale_date")
    search_fields = ("sale_no", "customer_name", "invoice_no")

    def has_change_permission(self, request, obj=None):
        return False
