"""
Web store models.

Web orders keep a snapshot of each item (name, price, quantity) and are not
tied to batches; stock is picked when the order is prepared.
"""
from decimal import Decimal

from django.contrib.auth.hashers import check_password, make_password
from django.db import models


class WebCustomer(models.Model):
    AUTH_EMAIL = "email"
    AUTH_GOOGLE = "google"

    AUTH_CHOICES = [
        (AUTH_EMAIL, "Email"),
        (AUTH_GOOGLE, "Google"),
    ]

    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    password = models.CharField(max_length=128, blank=True)
    auth_provider = models.CharField(max_length=10, choices=AUTH_CHOICES, default=AUTH_EMAIL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Web customer"
        verbose_name_plural = "Web customers"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password:
            return False
        return check_password(raw_password, self.password)


class WebOrder(models.Model):
    PAYMENT_COD = "cod"
    PAYMENT_JAZZCASH = "jazzcash"
    PAYMENT_EASYPAISA = "easypaisa"
    PAYMENT_CARD = "card"

    PAYMENT_CHOICES = [
        (PAYMENT_COD, "Cash on delivery"),
        (PAYMENT_JAZZCASH, "JazzCash"),
        (PAYMENT_EASYPAISA, "EasyPaisa"),
        (PAYMENT_CARD, "Credit/Debit card"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
    ]

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PREPARING = "preparing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Order placed"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PREPARING, "Preparing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    order_id = models.CharField(max_length=20, unique=True)
    customer = models.ForeignKey(
        WebCustomer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=20, db_index=True)
    customer_email = models.EmailField(blank=True)
    customer_address = models.CharField(max_length=255)
    customer_city = models.CharField(max_length=100)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.CharField(max_length=10, choices=PAYMENT_CHOICES, default=PAYMENT_COD)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    order_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Web order"
        verbose_name_plural = "Web orders"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_id} ({self.get_order_status_display()})"


class WebOrderItem(models.Model):
    order = models.ForeignKey(WebOrder, on_delete=models.CASCADE, related_name='items')
    medicine = models.ForeignKey(
        "medicines.Medicine",
        on_delete=models.SET_NULL,
        null=True,
        related_name='web_order_items',
    )
    name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    total = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.name} x{self.quantity}"
