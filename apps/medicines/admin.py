"""
Admin configuration for medicines app.
"""
from django.contrib import admin
from .models import Medicine


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ['name', 'generic_name', 'category', 'classification', 'reorder_level', 'is_active', 'is_web_live']
    list_filter = ['category', 'classification', 'is_active', 'is_web_live']
    search_fields = ['name', 'generic_name', 'brand_name', 'barcode']
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'generic_name', 'brand_name', 'manufacturer', 'description')
        }),
        ('Form', {
            'fields': ('category', 'dosage_form', 'strength', 'unit', 'barcode', 'classification')
        }),
        ('Stock policy', {
            'fields': ('reorder_level', 'reorder_quantity', 'is_active', 'is_web_live')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )
