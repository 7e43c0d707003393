# purchases/admin.py

from django.contrib import admin

from purchases.models import GoodsReceipt, GoodsReceiptItem, Purchase, PurchaseOrder, PurchaseOrderItem


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ("purchase_no", "item", "warehouse", "quantity", "unit_cost", "total_cost", "supplier_name", "purchase_date")
    search_fields = ("purchase_no", "supplier_name", "invoice_no")

    def has_change_permission(self, request, obj=None):
        return False


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("item", "quantity", "received_quantity", "unit_price", "amount")
    can_delete = False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("po_no", "supplier_name", "po_date", "status", "total_amount")
    list_filter = ("status",)
    search_fields = ("po_no", "supplier_name")
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ("status", "total_amount")


class GoodsReceiptItemInline(admin.TabularInline):
    model = GoodsReceiptItem
    extra = 0
    readonly_fields = ("po_item", "item", "received_quantity")
    can_delete = False


@admin.register(GoodsReceipt)
class GoodsReceiptAdmin(admin.ModelAdmin):
    list_display = ("receipt_no", "purchase_order", "warehouse", "receipt_date")
    search_fields = ("receipt_no", "purchase_order__po_no")
    inlines = [GoodsReceiptItemInline]

    def has_change_permission(self, request, obj=None):
        return False
