# customers/admin.py

from django.contrib import admin

from customers.models import Customer, CustomerLedgerEntry


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("customer_code", "customer_name", "current_balance", "credit_limit", "is_active")
    list_filter = ("is_active",)
    search_fields = ("customer_code", "customer_name", "email", "phone")
    readonly_fields = ("current_balance",)


@admin.register(CustomerLedgerEntry)
class CustomerLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "transaction_date", "transaction_type", "reference_no", "debit", "credit", "balance")
    list_filter = ("transaction_type",)
    search_fields = ("reference_no", "customer__customer_code")

    def has_change_permission(self, request, obj=None):
        return False
