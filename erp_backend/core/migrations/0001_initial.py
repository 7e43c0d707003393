from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DocumentCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "prefix",
                    models.CharField(
                        choices=[
                            ("PO", "Purchase Order"),
                            ("INV", "Invoice"),
                            ("PAY", "Payment"),
                            ("STK", "Stock Movement"),
                            ("PROD", "Production"),
                            ("PURCH", "Purchase"),
                            ("GR", "Goods Receipt"),
                            ("SALE", "Direct Sale"),
                        ],
                        max_length=10,
                    ),
                ),
                ("year", models.PositiveIntegerField()),
                ("last_no", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["prefix", "year"],
                "constraints": [
                    models.UniqueConstraint(fields=("prefix", "year"), name="uniq_document_counter_prefix_year"),
                ],
            },
        ),
    ]
