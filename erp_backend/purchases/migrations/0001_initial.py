import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("purchase_no", models.CharField(max_length=30, unique=True)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=15)),
                ("unit_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("total_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("supplier_name", models.CharField(blank=True, default="", max_length=255)),
                ("purchase_date", models.DateField(default=django.utils.timezone.localdate)),
                ("invoice_no", models.CharField(blank=True, default="", max_length=50)),
                ("remarks", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="inventory.item",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-purchase_date", "-id"],
                "indexes": [
                    models.Index(fields=["purchase_date"], name="purch_date_idx"),
                    models.Index(fields=["supplier_name"], name="purch_supplier_idx"),
                ],
            },
        ),
    ]
