from rest_framework import serializers

from apps.medicines.models import Medicine

from .models import Purchase, PurchaseItem, Supplier
from .services import SupplierService


class SupplierSerializer(serializers.ModelSerializer):
    current_balance = serializers.SerializerMethodField()

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'contact_person', 'phone', 'email', 'address', 'city',
            'ntn', 'gst_number', 'credit_limit', 'payment_terms', 'is_active',
            'current_balance', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'current_balance', 'created_at', 'updated_at']

    def get_current_balance(self, obj):
        return SupplierService.get_balance(obj)


class PurchaseItemSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    medicine_id = serializers.PrimaryKeyRelatedField(
        queryset=Medicine.objects.filter(is_active=True),
        source='medicine',
        write_only=True,
    )

    class Meta:
        model = PurchaseItem
        fields = [
            'id', 'medicine', 'medicine_id', 'medicine_name', 'quantity',
            'batch_number', 'expiry_date', 'manufacturing_date',
            'purchase_price', 'sale_price', 'mrp', 'discount_percent', 'tax_percent', 'total'
        ]
        read_only_fields = ['id', 'medicine', 'batch_number', 'expiry_date', 'manufacturing_date', 'total']


class PurchaseSerializer(serializers.ModelSerializer):
    items = PurchaseItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'id', 'purchase_number', 'supplier', 'supplier_name', 'purchase_date', 'due_date',
            'subtotal', 'discount_amount', 'tax_amount', 'total_amount', 'paid_amount', 'balance_amount',
            'status', 'notes', 'items', 'received_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PurchaseCreateSerializer(serializers.Serializer):
    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.filter(is_active=True))
    status = serializers.ChoiceField(
        choices=[Purchase.STATUS_DRAFT, Purchase.STATUS_ORDERED],
        default=Purchase.STATUS_DRAFT,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseItemSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("A purchase order needs at least one item.")
        return value


class ReceiveItemSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    batch_number = serializers.CharField()
    expiry_date = serializers.DateField()
    manufacturing_date = serializers.DateField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, min_value=1)
    purchase_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    mrp = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class ReceivePurchaseSerializer(serializers.Serializer):
    items = ReceiveItemSerializer(many=True)


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
