"""
System models for PharmaPOS.

A single ``AppSettings`` row holds the business configuration of the
pharmacy: company details, tax defaults, FEFO policy, alert thresholds and
the super-admin module toggles.
"""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class AppSettings(models.Model):
    class FefoMode(models.TextChoices):
        STRICT = "strict", "Strict"
        SUGGEST = "suggest", "Suggest"

    SINGLETON_ID = 1

    company_name = models.CharField(max_length=200, default="PharmaPOS Pakistan")
    company_address = models.CharField(max_length=255, default="Main Market, Lahore")
    company_phone = models.CharField(max_length=30, default="+92-300-1234567")
    company_email = models.EmailField(default="info@pharmapos.pk")
    company_ntn = models.CharField(max_length=30, blank=True, default="1234567-8")
    company_gst = models.CharField(max_length=30, blank=True, default="12-34-5678-901-23")

    default_tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("18.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    currency = models.CharField(max_length=10, default="PKR")

    fefo_mode = models.CharField(max_length=10, choices=FefoMode.choices, default=FefoMode.SUGGEST)
    expiry_critical_days = models.PositiveIntegerField(default=30)
    expiry_warning_days = models.PositiveIntegerField(default=60)
    expiry_notice_days = models.PositiveIntegerField(default=90)
    enable_expiry_alerts = models.BooleanField(default=True)
    enable_low_stock_alerts = models.BooleanField(default=True)

    enable_loyalty = models.BooleanField(default=True)
    loyalty_points_per_rupee = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1.00"))
    enable_jazzcash = models.BooleanField(default=True)
    enable_easypaisa = models.BooleanField(default=True)
    enable_card_payments = models.BooleanField(default=True)
    receipt_footer_text = models.CharField(max_length=255, default="Thank you for your purchase!")
    manager_can_see_profit = models.BooleanField(default=False)

    pos_enabled = models.BooleanField(default=True)
    management_enabled = models.BooleanField(default=True)
    web_store_enabled = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "App settings"
        verbose_name_plural = "App settings"

    def __str__(self):
        return f"Settings for {self.company_name}"

    def clean(self):
        super().clean()
        if not (self.expiry_critical_days <= self.expiry_warning_days <= self.expiry_notice_days):
            raise ValidationError(
                {"expiry_warning_days": "Alert days must satisfy critical <= warning <= notice."}
            )

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @property
    def expiry_alert_days(self):
        return {
            "critical": self.expiry_critical_days,
            "warning": self.expiry_warning_days,
            "notice": self.expiry_notice_days,
        }
