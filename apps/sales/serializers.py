"""
Serializers for sales app.

Read serializers for sales and customers, plus input serializers for the
POS cart and checkout endpoints.
"""
from decimal import Decimal

from rest_framework import serializers

from .models import Customer, Sale, SaleItem


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'email', 'cnic', 'address', 'date_of_birth',
            'loyalty_points', 'total_purchases', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'loyalty_points', 'total_purchases', 'created_at', 'updated_at']


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            'id', 'medicine', 'medicine_name', 'batch', 'batch_number', 'expiry_date',
            'quantity', 'unit_price', 'purchase_price', 'discount_percent', 'tax_percent',
            'total', 'profit', 'fefo_override'
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    """
    Serializer for Sale model.
    """
    items = SaleItemSerializer(many=True, read_only=True)
    cashier_username = serializers.CharField(source='cashier.username', read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            'id', 'invoice_number', 'customer', 'customer_name', 'customer_phone',
            'cashier', 'cashier_username',
            'subtotal', 'discount_amount', 'tax_amount', 'total_amount', 'gross_profit',
            'paid_amount', 'balance_amount', 'payment_method', 'payment_reference', 'status',
            'is_prescription', 'doctor_name', 'prescription_number', 'notes',
            'items', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SaleListSerializer(serializers.ModelSerializer):
    """
    Simplified serializer for sale list views.
    """
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            'id', 'invoice_number', 'customer_name', 'total_amount',
            'payment_method', 'status', 'items_count', 'created_at'
        ]

    def get_items_count(self, obj):
        return obj.items.count()


class CartAddSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    batch_id = serializers.IntegerField(required=False, allow_null=True)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100"), default=Decimal("0")
    )
    tax_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100"),
        required=False, allow_null=True
    )


class CartLineSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    batch_id = serializers.IntegerField()
    quantity = serializers.IntegerField(required=False, default=0)


class CheckoutSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_CHOICES, default=Sale.PAYMENT_CASH)
    cash_received = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    customer_id = serializers.PrimaryKeyRelatedField(
        queryset=Customer.objects.filter(is_active=True),
        source='customer',
        required=False,
        allow_null=True,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    is_prescription = serializers.BooleanField(required=False, default=False)
    doctor_name = serializers.CharField(required=False, allow_blank=True, default="")
    prescription_number = serializers.CharField(required=False, allow_blank=True, default="")
