from django.contrib import admin
from .models import Purchase, PurchaseItem, Supplier


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    readonly_fields = ['total']


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['purchase_number', 'supplier', 'purchase_date', 'total_amount', 'balance_amount', 'status']
    list_filter = ['status', 'supplier']
    search_fields = ['purchase_number', 'supplier__name']
    readonly_fields = ['received_at', 'created_at', 'updated_at']
    inlines = [PurchaseItemInline]


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'phone', 'city', 'credit_limit', 'is_active']
    search_fields = ['name', 'contact_person', 'phone']
    list_filter = ['is_active', 'city']
