"""
Admin configuration for sales app.
"""
from django.contrib import admin
from .models import Customer, Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = [
        'medicine', 'batch', 'medicine_name', 'batch_number', 'expiry_date', 'quantity',
        'unit_price', 'purchase_price', 'discount_percent', 'tax_percent', 'total', 'profit', 'fefo_override'
    ]
    can_delete = False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'customer_name', 'total_amount', 'payment_method', 'status', 'cashier', 'created_at']
    list_filter = ['payment_method', 'status', 'created_at']
    search_fields = ['invoice_number', 'customer_name', 'customer_phone']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [SaleItemInline]


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'cnic', 'loyalty_points', 'total_purchases', 'is_active']
    search_fields = ['name', 'phone', 'cnic']
    list_filter = ['is_active']
