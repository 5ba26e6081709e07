"""
Inventory models for PharmaPOS.

Stock is held in batches. Each batch carries its own expiry date, cost and
sale price; a medicine's stock is the sum of its active, non-empty batches.
Expiry and low-stock alerts are derived from batch state and are only ever
closed by a user.
"""
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from apps.medicines.models import Medicine


class Batch(models.Model):
    """
    A received lot of one medicine.

    The expiry date is fixed once the batch exists; correcting it means
    deactivating the batch and receiving a new one.
    """
    medicine = models.ForeignKey(
        Medicine,
        on_delete=models.PROTECT,
        related_name='batches',
    )
    batch_number = models.CharField(max_length=100)
    expiry_date = models.DateField(help_text="Fixed when the batch is created")
    manufacturing_date = models.DateField(null=True, blank=True)
    quantity = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Units currently on hand"
    )
    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Cost per unit"
    )
    sale_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Selling price per unit"
    )
    mrp = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Maximum retail price printed on the pack"
    )
    supplier = models.ForeignKey(
        "purchases.Supplier",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='batches',
    )
    purchase = models.ForeignKey(
        "purchases.Purchase",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='batches',
    )
    location = models.CharField(max_length=100, blank=True, help_text="Shelf or rack")
    is_active = models.BooleanField(default=True)
    received_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Batch"
        verbose_name_plural = "Batches"
        ordering = ['expiry_date', 'id']
        indexes = [
            models.Index(fields=['medicine', 'expiry_date'], name='batch_medicine_expiry_idx'),
            models.Index(fields=['expiry_date'], name='batch_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.medicine.name} #{self.batch_number} (exp {self.expiry_date})"

    def clean(self):
        super().clean()
        if self.manufacturing_date and self.expiry_date and self.manufacturing_date > self.expiry_date:
            raise ValidationError({"manufacturing_date": "Manufacturing date must be before expiry date."})

    def save(self, *args, **kwargs):
        if self.pk:
            original_expiry = Batch.objects.filter(pk=self.pk).values_list("expiry_date", flat=True).first()
            if original_expiry is not None and str(original_expiry) != str(self.expiry_date):
                raise ValidationError({"expiry_date": "Expiry date cannot be changed once a batch is created."})
        super().save(*args, **kwargs)

    @property
    def stock_value(self):
        return self.quantity * self.purchase_price


class AlertBase(models.Model):
    is_resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ExpiryAlert(AlertBase):
    """
    Expiry alert for one batch.

    While open, the level of an alert only moves towards ``critical``.
    """
    LEVEL_NOTICE = "notice"
    LEVEL_WARNING = "warning"
    LEVEL_CRITICAL = "critical"

    LEVEL_CHOICES = [
        (LEVEL_CRITICAL, "Critical"),
        (LEVEL_WARNING, "Warning"),
        (LEVEL_NOTICE, "Notice"),
    ]

    SEVERITY = {
        LEVEL_NOTICE: 1,
        LEVEL_WARNING: 2,
        LEVEL_CRITICAL: 3,
    }

    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name='expiry_alerts')
    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name='expiry_alerts')
    alert_level = models.CharField(max_length=10, choices=LEVEL_CHOICES)
    days_until_expiry = models.IntegerField()
    quantity = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Expiry Alert"
        verbose_name_plural = "Expiry Alerts"
        ordering = ['days_until_expiry', '-created_at']
        indexes = [
            models.Index(fields=['batch', 'is_resolved'], name='expiry_alert_batch_idx'),
        ]

    def __str__(self):
        return f"{self.get_alert_level_display()}: {self.batch} in {self.days_until_expiry} days"

    @property
    def severity(self):
        return self.SEVERITY[self.alert_level]


class LowStockAlert(AlertBase):
    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name='low_stock_alerts')
    current_stock = models.PositiveIntegerField(default=0)
    reorder_level = models.PositiveIntegerField(default=0)
    reorder_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Low Stock Alert"
        verbose_name_plural = "Low Stock Alerts"
        ordering = ['current_stock', '-created_at']
        indexes = [
            models.Index(fields=['medicine', 'is_resolved'], name='low_stock_alert_med_idx'),
        ]

    def __str__(self):
        return f"Low stock: {self.medicine.name} ({self.current_stock}/{self.reorder_level})"
