# inventory/models/warehouse.py

from django.db import models


class Warehouse(models.Model):
    warehouse_code = models.CharField(max_length=50, unique=True)
    warehouse_name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["warehouse_code"]

    def __str__(self):
        return f"{self.warehouse_code} - {self.warehouse_name}"
