# core/admin.py

from django.contrib import admin

from core.models import DocumentCounter


@admin.register(DocumentCounter)
class DocumentCounterAdmin(admin.ModelAdmin):
    list_display = ("prefix", "year", "last_no", "updated_at")
    list_filter = ("prefix", "year")
    readonly_fields = ("updated_at",)
