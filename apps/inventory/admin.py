"""
Admin configuration for inventory app.
"""
from django.contrib import admin
from .models import Batch, ExpiryAlert, LowStockAlert


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['medicine', 'batch_number', 'expiry_date', 'quantity', 'purchase_price', 'sale_price', 'is_active']
    list_filter = ['is_active', 'expiry_date', 'supplier']
    search_fields = ['medicine__name', 'batch_number']
    readonly_fields = ['received_at', 'updated_at']
    fieldsets = (
        ('Medicine', {
            'fields': ('medicine', 'batch_number', 'supplier', 'purchase', 'location')
        }),
        ('Dates', {
            'fields': ('manufacturing_date', 'expiry_date')
        }),
        ('Stock & Pricing', {
            'fields': ('quantity', 'purchase_price', 'sale_price', 'mrp', 'is_active')
        }),
        ('Timestamps', {
            'fields': ('received_at', 'updated_at')
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ['expiry_date']
        return self.readonly_fields


@admin.register(ExpiryAlert)
class ExpiryAlertAdmin(admin.ModelAdmin):
    list_display = ['medicine', 'batch', 'alert_level', 'days_until_expiry', 'quantity', 'is_resolved', 'created_at']
    list_filter = ['alert_level', 'is_resolved']
    search_fields = ['medicine__name', 'batch__batch_number']


@admin.register(LowStockAlert)
class LowStockAlertAdmin(admin.ModelAdmin):
    list_display = ['medicine', 'current_stock', 'reorder_level', 'reorder_quantity', 'is_resolved', 'created_at']
    list_filter = ['is_resolved']
    search_fields = ['medicine__name']
