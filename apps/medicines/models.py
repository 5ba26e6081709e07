"""
Medicine models for PharmaPOS.

A Medicine is the catalogue entry; the stock itself lives in
``inventory.Batch`` rows, each with its own expiry date and prices.
"""
from django.core.validators import MinValueValidator
from django.db import models


class Medicine(models.Model):
    """
    Catalogue entry for a product the pharmacy sells.

    Medicines are never hard-deleted: deactivating one (``is_active=False``)
    hides it from the POS, the storefront and the alert engine while keeping
    past sales intact.
    """

    class Category(models.TextChoices):
        TABLETS = "tablets", "Tablets"
        CAPSULES = "capsules", "Capsules"
        SYRUPS = "syrups", "Syrups"
        INJECTIONS = "injections", "Injections"
        DROPS = "drops", "Drops"
        CREAMS = "creams", "Creams"
        OINTMENTS = "ointments", "Ointments"
        INHALERS = "inhalers", "Inhalers"
        POWDERS = "powders", "Powders"
        SUSPENSIONS = "suspensions", "Suspensions"
        SOLUTIONS = "solutions", "Solutions"
        MEDICAL_DEVICES = "medical_devices", "Medical devices"
        SUPPLEMENTS = "supplements", "Supplements"
        PERSONAL_CARE = "personal_care", "Personal care"
        BABY_CARE = "baby_care", "Baby care"
        OTC = "otc", "OTC"

    class Classification(models.TextChoices):
        OTC = "otc", "Over the counter"
        PRESCRIPTION = "prescription", "Prescription only"
        CONTROLLED = "controlled", "Controlled"

    name = models.CharField(
        max_length=200,
        help_text="Medicine name (e.g., Panadol 500mg)"
    )
    generic_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Active ingredient (e.g., Paracetamol)"
    )
    brand_name = models.CharField(max_length=200, blank=True)
    manufacturer = models.CharField(max_length=200, blank=True)
    category = models.CharField(
        max_length=30,
        choices=Category.choices,
        default=Category.TABLETS,
    )
    dosage_form = models.CharField(max_length=100, blank=True)
    strength = models.CharField(max_length=50, blank=True)
    unit = models.CharField(max_length=30, default="strip")
    barcode = models.CharField(max_length=64, blank=True, db_index=True)
    classification = models.CharField(
        max_length=20,
        choices=Classification.choices,
        default=Classification.OTC,
    )
    description = models.TextField(blank=True)
    reorder_level = models.PositiveIntegerField(
        default=0,
        help_text="Raise a low-stock alert at or below this stock; 0 disables the alert"
    )
    reorder_quantity = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Suggested quantity to order when stock runs low"
    )
    is_active = models.BooleanField(default=True)
    is_web_live = models.BooleanField(
        default=True,
        help_text="Listed on the web store"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Medicine"
        verbose_name_plural = "Medicines"
        ordering = ['name']
        indexes = [
            models.Index(fields=['category'], name='medicine_category_idx'),
            models.Index(fields=['is_active'], name='medicine_active_idx'),
        ]

    def __str__(self):
        if self.strength:
            return f"{self.name} {self.strength}"
        return self.name

    @property
    def is_controlled(self):
        return self.classification == self.Classification.CONTROLLED
