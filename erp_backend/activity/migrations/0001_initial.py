import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("LOGIN", "Login"),
                            ("ITEM_CREATE", "Item Created"),
                            ("WAREHOUSE_CREATE", "Warehouse Created"),
                            ("STOCK_MOVEMENT", "Stock Movement"),
                            ("PURCHASE_CREATE", "Purchase Recorded"),
                            ("SALE_CREATE", "Direct Sale Recorded"),
                            ("PRODUCTION_CREATE", "Production Recorded"),
                            ("PRODUCTION_DELETE", "Production Deleted"),
                            ("CUSTOMER_CREATE", "Customer Created"),
                            ("INVOICE_CREATE", "Invoice Created"),
                            ("INVOICE_UPDATE", "Invoice Updated"),
                            ("INVOICE_DELETE", "Invoice Deleted"),
                            ("PAYMENT_CREATE", "Payment Created"),
                            ("PAYMENT_UPDATE", "Payment Updated"),
                            ("PAYMENT_DELETE", "Payment Deleted"),
                            ("REPAIR_RUN", "Consistency Repair"),
                        ],
                        max_length=40,
                    ),
                ),
                ("entity_type", models.CharField(max_length=40)),
                ("entity_id", models.CharField(blank=True, default="", max_length=64)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "log_level",
                    models.CharField(
                        choices=[("INFO", "Info"), ("WARNING", "Warning"), ("ERROR", "Error")],
                        default="INFO",
                        max_length=10,
                    ),
                ),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, default="", max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("duration_ms", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activity_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="activity_entity_idx"),
                    models.Index(fields=["action", "created_at"], name="activity_action_created_idx"),
                ],
            },
        ),
    ]
