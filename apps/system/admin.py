from django.contrib import admin

from .models import AppSettings


@admin.register(AppSettings)
class AppSettingsAdmin(admin.ModelAdmin):
    list_display = ("company_name", "currency", "default_tax_rate", "fefo_mode", "pos_enabled", "management_enabled", "web_store_enabled")
    fieldsets = (
        ("Company", {"fields": ("company_name", "company_address", "company_phone", "company_email", "company_ntn", "company_gst")}),
        ("Sales", {"fields": ("default_tax_rate", "currency", "receipt_footer_text", "manager_can_see_profit")}),
        ("Inventory", {"fields": ("fefo_mode", "expiry_critical_days", "expiry_warning_days", "expiry_notice_days", "enable_expiry_alerts", "enable_low_stock_alerts")}),
        ("Payments and loyalty", {"fields": ("enable_jazzcash", "enable_easypaisa", "enable_card_payments", "enable_loyalty", "loyalty_points_per_rupee")}),
        ("Modules", {"fields": ("pos_enabled", "management_enabled", "web_store_enabled")}),
    )

    def has_add_permission(self, request):
        return not AppSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
