from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AppSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("company_name", models.CharField(default="PharmaPOS Pakistan", max_length=200)),
                ("company_address", models.CharField(default="Main Market, Lahore", max_length=255)),
                ("company_phone", models.CharField(default="+92-300-1234567", max_length=30)),
                ("company_email", models.EmailField(default="info@pharmapos.pk", max_length=254)),
                ("company_ntn", models.CharField(blank=True, default="1234567-8", max_length=30)),
                ("company_gst", models.CharField(blank=True, default="12-34-5678-901-23", max_length=30)),
                (
                    "default_tax_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("18.00"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                ("currency", models.CharField(default="PKR", max_length=10)),
                (
                    "fefo_mode",
                    models.CharField(
                        choices=[("strict", "Strict"), ("suggest", "Suggest")], default="suggest", max_length=10
                    ),
                ),
                ("expiry_critical_days", models.PositiveIntegerField(default=30)),
                ("expiry_warning_days", models.PositiveIntegerField(default=60)),
                ("expiry_notice_days", models.PositiveIntegerField(default=90)),
                ("enable_expiry_alerts", models.BooleanField(default=True)),
                ("enable_low_stock_alerts", models.BooleanField(default=True)),
                ("enable_loyalty", models.BooleanField(default=True)),
                ("loyalty_points_per_rupee", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=6)),
                ("enable_jazzcash", models.BooleanField(default=True)),
                ("enable_easypaisa", models.BooleanField(default=True)),
                ("enable_card_payments", models.BooleanField(default=True)),
                ("receipt_footer_text", models.CharField(default="Thank you for your purchase!", max_length=255)),
                ("manager_can_see_profit", models.BooleanField(default=False)),
                ("pos_enabled", models.BooleanField(default=True)),
                ("management_enabled", models.BooleanField(default=True)),
                ("web_store_enabled", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "App settings",
                "verbose_name_plural": "App settings",
            },
        ),
    ]
