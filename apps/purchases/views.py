"""
API views for purchases app.

Suppliers, purchase orders and receiving stock into batches.
"""
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.permissions import ModulePermission

from .models import Purchase, Supplier
from .serializers import (
    PaymentSerializer,
    PurchaseCreateSerializer,
    PurchaseSerializer,
    ReceivePurchaseSerializer,
    SupplierSerializer,
)
from .services import PurchaseService



class SupplierViewSet(viewsets.ModelViewSet):
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer
    permission_classes = [ModulePermission]
    permission_module = "purchases"
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "contact_person", "phone", "city"]
    ordering = ["name"]

    def destroy(self, request, *args, **kwargs):
        supplier = self.get_object()
        supplier.is_active = False
        supplier.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)


class PurchaseViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = Purchase.objects.select_related("supplier").prefetch_related("items__medicine").all()
    serializer_class = PurchaseSerializer
    permission_classes = [ModulePermission]
    permission_module = "purchases"
    permission_actions = {"receive": "update", "cancel": "update", "pay": "update"}
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["purchase_number", "supplier__name"]
    ordering = ["-created_at"]

    def get_queryset(self):
        queryset = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        supplier_id = self.request.query_params.get("supplier")
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = PurchaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        purchase = PurchaseService.create_purchase(
            supplier=data["supplier"],
            items=data["items"],
            status=data["status"],
            notes=data["notes"],
            user=request.user,
        )
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def receive(self, request, pk=None):
        purchase = self.get_object()
        serializer = ReceivePurchaseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        received = {}
        for line in serializer.validated_data["items"]:
            line = dict(line)
            received[line.pop("item_id")] = line
        purchase = PurchaseService.receive_purchase(purchase, received)
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        purchase = PurchaseService.cancel_purchase(self.get_object())
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        purchase = PurchaseService.record_payment(self.get_object(), serializer.validated_data["amount"])
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_200_OK)
