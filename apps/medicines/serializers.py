"""
Serializers for medicines app.
"""
from rest_framework import serializers

from apps.inventory.services import StockService

from .models import Medicine


class MedicineSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    current_stock = serializers.SerializerMethodField()

    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'generic_name', 'brand_name', 'manufacturer',
            'category', 'category_display', 'dosage_form', 'strength', 'unit',
            'barcode', 'classification', 'description',
            'reorder_level', 'reorder_quantity', 'is_active', 'is_web_live',
            'current_stock', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'current_stock', 'created_at', 'updated_at']

    def get_current_stock(self, obj):
        return StockService.get_medicine_stock(obj.id)


class MedicineListSerializer(serializers.ModelSerializer):
    """
    Simplified serializer for medicine list views.
    """
    current_stock = serializers.SerializerMethodField()
    is_low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'generic_name', 'category', 'strength', 'barcode',
            'classification', 'reorder_level', 'is_active', 'current_stock', 'is_low_stock'
        ]

    def get_current_stock(self, obj):
        return StockService.get_medicine_stock(obj.id)

    def get_is_low_stock(self, obj):
        if obj.reorder_level <= 0:
            return False
        return StockService.get_medicine_stock(obj.id) <= obj.reorder_level
