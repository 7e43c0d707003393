import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("customer_code", models.CharField(max_length=50, unique=True)),
                ("customer_name", models.CharField(max_length=255)),
                ("contact_person", models.CharField(blank=True, default="", max_length=255)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("address", models.TextField(blank=True, default="")),
                ("credit_limit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                (
                    "current_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        editable=False,
                        help_text="Cached SUM of open invoice balances.",
                        max_digits=15,
                    ),
                ),
                ("payment_terms_days", models.PositiveIntegerField(default=30)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["customer_code"],
            },
        ),
        migrations.CreateModel(
            name="CustomerLedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("INVOICE", "Invoice"),
                            ("PAYMENT", "Payment"),
                            ("OPENING_BALANCE", "Opening Balance"),
                        ],
                        max_length=20,
                    ),
                ),
                ("reference_no", models.CharField(blank=True, default="", max_length=50)),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["customer_id", "id"],
                "indexes": [
                    models.Index(fields=["customer", "transaction_date"], name="cust_ledger_cust_date_idx"),
                    models.Index(fields=["reference_no"], name="cust_ledger_ref_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit__gte", 0), ("credit__gte", 0)),
                        name="cust_ledger_debit_credit_non_negative",
                    ),
                ],
            },
        ),
    ]
