from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("medicines", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="WebCustomer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("password", models.CharField(blank=True, max_length=128)),
                ("auth_provider", models.CharField(choices=[("email", "Email"), ("google", "Google")], default="email", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Web customer",
                "verbose_name_plural": "Web customers",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="WebOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(max_length=20, unique=True)),
                ("customer_name", models.CharField(max_length=200)),
                ("customer_phone", models.CharField(db_index=True, max_length=20)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                ("customer_address", models.CharField(max_length=255)),
                ("customer_city", models.CharField(max_length=100)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("payment_method", models.CharField(choices=[("cod", "Cash on delivery"), ("jazzcash", "JazzCash"), ("easypaisa", "EasyPaisa"), ("card", "Credit/Debit card")], default="cod", max_length=10)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid")], default="pending", max_length=10)),
                ("order_status", models.CharField(choices=[("pending", "Order placed"), ("confirmed", "Confirmed"), ("preparing", "Preparing"), ("shipped", "Shipped"), ("delivered", "Delivered"), ("cancelled", "Cancelled")], default="pending", max_length=10)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="store.webcustomer")),
            ],
            options={
                "verbose_name": "Web order",
                "verbose_name_plural": "Web orders",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="WebOrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("quantity", models.PositiveIntegerField()),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("medicine", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="web_order_items", to="medicines.medicine")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="store.weborder")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
