import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("warehouse_code", models.CharField(max_length=50, unique=True)),
                ("warehouse_name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["warehouse_code"],
            },
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_code", models.CharField(max_length=50, unique=True)),
                ("item_name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("unit_of_measure", models.CharField(default="PCS", max_length=20)),
                ("standard_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("selling_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("reorder_level", models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=15)),
                (
                    "current_stock",
                    models.DecimalField(
                        decimal_places=3,
                        default=Decimal("0.000"),
                        editable=False,
                        help_text="Cached SUM of stock balances across warehouses.",
                        max_digits=15,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["item_code"],
                "indexes": [
                    models.Index(fields=["is_active", "item_code"], name="inv_item_active_code_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=15)),
                ("last_updated", models.DateTimeField(auto_now=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_balances",
                        to="inventory.item",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_balances",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["item_id", "warehouse_id"],
                "constraints": [
                    models.UniqueConstraint(fields=("item", "warehouse"), name="uniq_stock_balance_item_warehouse"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("movement_no", models.CharField(max_length=30, unique=True)),
                (
                    "movement_type",
                    models.CharField(
                        choices=[
                            ("PURCHASE", "Purchase"),
                            ("SALE", "Sale"),
                            ("PRODUCTION", "Production"),
                            ("ADJUSTMENT", "Adjustment"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=15)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ("reference_doctype", models.CharField(blank=True, default="", max_length=30)),
                ("reference_docno", models.CharField(blank=True, default="", max_length=50)),
                ("remarks", models.TextField(blank=True, default="")),
                ("movement_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="inventory.item",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-movement_date", "-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["item", "warehouse"], name="inv_mov_item_wh_idx"),
                    models.Index(fields=["reference_docno", "item"], name="inv_mov_ref_item_idx"),
                    models.Index(fields=["movement_type", "movement_date"], name="inv_mov_type_date_idx"),
                ],
            },
        ),
    ]
