"""
Serializers for the web store.
"""
from rest_framework import serializers

from apps.medicines.models import Medicine

from .models import WebCustomer, WebOrder, WebOrderItem


class ProductSerializer(serializers.ModelSerializer):
    """Catalogue entry as shown on the storefront; ``price`` and ``stock`` are annotated."""

    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock = serializers.IntegerField(read_only=True)
    requires_prescription = serializers.SerializerMethodField()

    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'generic_name', 'brand_name', 'manufacturer', 'category',
            'dosage_form', 'strength', 'unit', 'description', 'price', 'stock',
            'requires_prescription'
        ]

    def get_requires_prescription(self, obj):
        return obj.classification == Medicine.Classification.PRESCRIPTION


class WebCartAddSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    quantity = serializers.IntegerField(default=1, min_value=1)


class WebCartUpdateSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    quantity = serializers.IntegerField()


class WebCartRemoveSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()


class WebOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebOrderItem
        fields = ['medicine', 'name', 'quantity', 'price', 'total']
        read_only_fields = fields


class WebOrderSerializer(serializers.ModelSerializer):
    items = WebOrderItemSerializer(many=True, read_only=True)
    order_status_display = serializers.CharField(source='get_order_status_display', read_only=True)

    class Meta:
        model = WebOrder
        fields = [
            'order_id', 'customer_name', 'customer_phone', 'customer_email',
            'customer_address', 'customer_city', 'subtotal', 'delivery_fee', 'total',
            'payment_method', 'payment_status', 'order_status', 'order_status_display',
            'notes', 'items', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class WebOrderStatusSerializer(serializers.Serializer):
    order_status = serializers.ChoiceField(choices=WebOrder.STATUS_CHOICES)


class WebCustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebCustomer
        fields = ['id', 'name', 'email', 'phone', 'address', 'city', 'auth_provider', 'created_at']
        read_only_fields = ['id', 'email', 'auth_provider', 'created_at']
