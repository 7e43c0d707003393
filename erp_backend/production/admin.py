# production/admin.py

from django.contrib import admin

from production.models import Production, ProductionInput


class ProductionInputInline(admin.TabularInline):
    model = ProductionInput
    extra = 0
    can_delete = False
    readonly_fields = ("item", "quantity", "warehouse")


@admin.register(Production)
class ProductionAdmin(admin.ModelAdmin):
    list_display = ("production_no", "output_item", "output_quantity", "warehouse", "raw_materials_warehouse", "production_date")
    search_fields = ("production_no",)
    inlines = [ProductionInputInline]

    def has_change_permission(self, request, obj=None):
        return False
