from django.contrib import admin

from .models import WebCustomer, WebOrder, WebOrderItem


class WebOrderItemInline(admin.TabularInline):
    model = WebOrderItem
    extra = 0
    readonly_fields = ['medicine', 'name', 'quantity', 'price', 'total']


@admin.register(WebOrder)
class WebOrderAdmin(admin.ModelAdmin):
    list_display = ['order_id', 'customer_name', 'customer_phone', 'total', 'payment_method', 'payment_status', 'order_status', 'created_at']
    list_filter = ['order_status', 'payment_method', 'payment_status']
    search_fields = ['order_id', 'customer_name', 'customer_phone']
    readonly_fields = ['order_id', 'subtotal', 'delivery_fee', 'total', 'created_at', 'updated_at']
    inlines = [WebOrderItemInline]


@admin.register(WebCustomer)
class WebCustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'city', 'auth_provider', 'created_at']
    search_fields = ['name', 'email', 'phone']
    exclude = ['password']
