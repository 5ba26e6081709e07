import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Medicine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Medicine name (e.g., Panadol 500mg)", max_length=200)),
                ("generic_name", models.CharField(blank=True, help_text="Active ingredient (e.g., Paracetamol)", max_length=200)),
                ("brand_name", models.CharField(blank=True, max_length=200)),
                ("manufacturer", models.CharField(blank=True, max_length=200)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("tablets", "Tablets"),
                            ("capsules", "Capsules"),
                            ("syrups", "Syrups"),
                            ("injections", "Injections"),
                            ("drops", "Drops"),
                            ("creams", "Creams"),
                            ("ointments", "Ointments"),
                            ("inhalers", "Inhalers"),
                            ("powders", "Powders"),
                            ("suspensions", "Suspensions"),
                            ("solutions", "Solutions"),
                            ("medical_devices", "Medical devices"),
                            ("supplements", "Supplements"),
                            ("personal_care", "Personal care"),
                            ("baby_care", "Baby care"),
                            ("otc", "OTC"),
                        ],
                        default="tablets",
                        max_length=30,
                    ),
                ),
                ("dosage_form", models.CharField(blank=True, max_length=100)),
                ("strength", models.CharField(blank=True, max_length=50)),
                ("unit", models.CharField(default="strip", max_length=30)),
                ("barcode", models.CharField(blank=True, db_index=True, max_length=64)),
                (
                    "classification",
                    models.CharField(
                        choices=[
                            ("otc", "Over the counter"),
                            ("prescription", "Prescription only"),
                            ("controlled", "Controlled"),
                        ],
                        default="otc",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "reorder_level",
                    models.PositiveIntegerField(
                        default=0, help_text="Raise a low-stock alert at or below this stock; 0 disables the alert"
                    ),
                ),
                (
                    "reorder_quantity",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Suggested quantity to order when stock runs low",
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("is_web_live", models.BooleanField(default=True, help_text="Listed on the web store")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Medicine",
                "verbose_name_plural": "Medicines",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["category"], name="medicine_category_idx"),
                    models.Index(fields=["is_active"], name="medicine_active_idx"),
                ],
            },
        ),
    ]
