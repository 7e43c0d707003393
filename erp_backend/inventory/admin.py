# inventory/admin.py

from django.contrib import admin

from inventory.models import Item, StockBalance, StockMovement, Warehouse


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ("item_code", "item_name", "unit_of_measure", "current_stock", "reorder_level", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("item_code", "item_name")
    readonly_fields = ("current_stock",)


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("warehouse_code", "warehouse_name", "location", "is_active")
    search_fields = ("warehouse_code", "warehouse_name")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("movement_no", "movement_date", "item", "warehouse", "movement_type", "quantity", "reference_docno")
    list_filter = ("movement_type", "warehouse")
    search_fields = ("movement_no", "reference_docno", "item__item_code")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockBalance)
class StockBalanceAdmin(admin.ModelAdmin):
    list_display = ("item", "warehouse", "quantity", "last_updated")
    list_filter = ("warehouse",)
    readonly_fields = ("item", "warehouse", "quantity", "last_updated")
