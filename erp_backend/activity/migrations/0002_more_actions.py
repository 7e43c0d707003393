from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("activity", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="activitylog",
            name="action",
            field=models.CharField(
                choices=[
                    ("LOGIN", "Login"),
                    ("ITEM_CREATE", "Item Created"),
                    ("WAREHOUSE_CREATE", "Warehouse Created"),
                    ("STOCK_MOVEMENT", "Stock Movement"),
                    ("PURCHASE_CREATE", "Purchase Recorded"),
                    ("PURCHASE_DELETE", "Purchase Deleted"),
                    ("PURCHASE_ORDER_CREATE", "Purchase Order Created"),
                    ("PURCHASE_ORDER_UPDATE", "Purchase Order Updated"),
                    ("PURCHASE_ORDER_DELETE", "Purchase Order Deleted"),
                    ("GOODS_RECEIPT_CREATE", "Goods Received"),
                    ("SALE_CREATE", "Direct Sale Recorded"),
                    ("SALE_DELETE", "Direct Sale Deleted"),
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
    ]
