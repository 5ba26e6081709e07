"""
Sales models for PharmaPOS.

A Sale is one completed POS transaction. Every SaleItem is tied to the batch
its units were taken from and captures that batch's purchase price as the
cost basis, so profit stays correct after prices change.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Customer(models.Model):
    """
    Counter customer, optionally attached to sales for loyalty tracking.
    """
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, db_index=True)
    email = models.EmailField(blank=True)
    cnic = models.CharField(max_length=20, blank=True, help_text="National identity card number")
    address = models.CharField(max_length=255, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    loyalty_points = models.PositiveIntegerField(default=0)
    total_purchases = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Customer"
        verbose_name_plural = "Customers"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.phone})"


class Sale(models.Model):
    """
    Sale model representing a complete sales transaction.

    Totals follow the POS cart: discount and tax are both computed on the
    gross line totals, ``total = subtotal - discount + tax``.
    """
    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_JAZZCASH = "jazzcash"
    PAYMENT_EASYPAISA = "easypaisa"
    PAYMENT_BANK_TRANSFER = "bank_transfer"

    PAYMENT_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_JAZZCASH, "JazzCash"),
        (PAYMENT_EASYPAISA, "EasyPaisa"),
        (PAYMENT_BANK_TRANSFER, "Bank transfer"),
    ]

    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    invoice_number = models.CharField(max_length=20, unique=True)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales',
    )
    customer_name = models.CharField(max_length=200, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='sales',
        help_text="User who processed the sale"
    )
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    gross_profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Change returned for cash payments"
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_CHOICES, default=PAYMENT_CASH)
    payment_reference = models.CharField(max_length=40, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_COMPLETED)
    is_prescription = models.BooleanField(default=False)
    doctor_name = models.CharField(max_length=200, blank=True)
    prescription_number = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Sale"
        verbose_name_plural = "Sales"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='sale_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.total_amount}"


class SaleItem(models.Model):
    """
    One sold line: a quantity of one medicine taken from one batch.
    """
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name='items',
    )
    medicine = models.ForeignKey(
        "medicines.Medicine",
        on_delete=models.PROTECT,
        related_name='sale_items',
    )
    batch = models.ForeignKey(
        "inventory.Batch",
        on_delete=models.PROTECT,
        related_name='sale_items',
    )
    medicine_name = models.CharField(max_length=200)
    batch_number = models.CharField(max_length=100)
    expiry_date = models.DateField()
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Batch cost per unit at the time of sale"
    )
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, help_text="quantity x unit_price")
    profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    fefo_override = models.BooleanField(
        default=False,
        help_text="Sold from this batch while an earlier-expiring batch had stock"
    )

    class Meta:
        verbose_name = "Sale Item"
        verbose_name_plural = "Sale Items"
        ordering = ['id']

    def __str__(self):
        return f"{self.medicine_name} x{self.quantity} (#{self.batch_number})"
