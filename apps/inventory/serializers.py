"""
Serializers for inventory app.

Handles serialization of batches and the derived expiry / low-stock alerts.
"""
from rest_framework import serializers

from apps.medicines.models import Medicine

from .models import Batch, ExpiryAlert, LowStockAlert


class BatchSerializer(serializers.ModelSerializer):
    """
    Serializer for Batch model.

    ``expiry_date`` is accepted on create only.
    """
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    medicine_id = serializers.PrimaryKeyRelatedField(
        queryset=Medicine.objects.filter(is_active=True),
        source='medicine',
        write_only=True,
    )
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)

    class Meta:
        model = Batch
        fields = [
            'id', 'medicine', 'medicine_id', 'medicine_name', 'batch_number',
            'expiry_date', 'manufacturing_date', 'quantity',
            'purchase_price', 'sale_price', 'mrp',
            'supplier', 'supplier_name', 'purchase', 'location', 'is_active',
            'received_at', 'updated_at'
        ]
        read_only_fields = ['id', 'medicine', 'purchase', 'received_at', 'updated_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if isinstance(self.instance, Batch):
            self.fields['expiry_date'].read_only = True
            self.fields['medicine_id'].read_only = True

    def validate(self, attrs):
        manufacturing_date = attrs.get('manufacturing_date')
        expiry_date = attrs.get('expiry_date') or getattr(self.instance, 'expiry_date', None)
        if manufacturing_date and expiry_date and manufacturing_date > expiry_date:
            raise serializers.ValidationError({
                'manufacturing_date': 'Manufacturing date must be before expiry date.'
            })
        return attrs


class ExpiryAlertSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    batch_number = serializers.CharField(source='batch.batch_number', read_only=True)
    expiry_date = serializers.DateField(source='batch.expiry_date', read_only=True)

    class Meta:
        model = ExpiryAlert
        fields = [
            'id', 'batch', 'batch_number', 'medicine', 'medicine_name', 'expiry_date',
            'alert_level', 'days_until_expiry', 'quantity',
            'is_resolved', 'resolved_at', 'resolved_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class LowStockAlertSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = LowStockAlert
        fields = [
            'id', 'medicine', 'medicine_name', 'current_stock', 'reorder_level', 'reorder_quantity',
            'is_resolved', 'resolved_at', 'resolved_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields
