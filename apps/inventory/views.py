"""
API views for inventory app.

Batches (stock on hand) and the expiry / low-stock alert lists.
"""
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.permissions import ModulePermission

from .models import Batch, ExpiryAlert, LowStockAlert
from .serializers import BatchSerializer, ExpiryAlertSerializer, LowStockAlertSerializer
from .services import AlertService, StockService


class BatchViewSet(viewsets.ModelViewSet):
    queryset = Batch.objects.select_related("medicine", "supplier").all()
    serializer_class = BatchSerializer
    permission_classes = [ModulePermission]
    permission_module = "inventory"
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["batch_number", "medicine__name"]
    ordering_fields = ["expiry_date", "quantity", "received_at"]
    ordering = ["expiry_date", "id"]

    def get_queryset(self):
        queryset = super().get_queryset()

        medicine_id = self.request.query_params.get("medicine")
        if medicine_id:
            queryset = queryset.filter(medicine_id=medicine_id)

        in_stock = self.request.query_params.get("in_stock")
        if in_stock == "true":
            queryset = queryset.filter(is_active=True, quantity__gt=0)

        return queryset

    def perform_create(self, serializer):
        batch = serializer.save()
        AlertService.derive_low_stock_alerts(medicine_ids=[batch.medicine_id])

    def destroy(self, request, *args, **kwargs):
        batch = self.get_object()
        batch.is_active = False
        batch.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def expiring(self, request):
        try:
            days = int(request.query_params.get("days", 30))
        except (TypeError, ValueError):
            return Response({"error": "days must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        batches = StockService.get_expiring_batches(days)
        serializer = self.get_serializer(batches, many=True)
        return Response({"count": len(serializer.data), "days": days, "batches": serializer.data})


class AlertViewSetMixin:
    permission_classes = [ModulePermission]
    permission_module = "inventory"
    permission_actions = {"resolve": "update", "refresh": "update"}

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.detail:
            return queryset
        resolved = self.request.query_params.get("resolved")
        if resolved == "true":
            return queryset.filter(is_resolved=True)
        if resolved == "all":
            return queryset
        return queryset.filter(is_resolved=False)

    @action(detail=True, methods=["post"])
    def resolve(self, request, pk=None):
        alert = AlertService.resolve(self.get_object(), user=request.user)
        return Response(self.get_serializer(alert).data, status=status.HTTP_200_OK)


class ExpiryAlertViewSet(AlertViewSetMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = ExpiryAlert.objects.select_related("batch", "medicine").all()
    serializer_class = ExpiryAlertSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        level = self.request.query_params.get("level")
        if level:
            queryset = queryset.filter(alert_level=level)
        return queryset

    @action(detail=False, methods=["post"])
    def refresh(self, request):
        created = AlertService.derive_expiry_alerts()
        return Response({"created": len(created)}, status=status.HTTP_200_OK)


class LowStockAlertViewSet(AlertViewSetMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = LowStockAlert.objects.select_related("medicine").all()
    serializer_class = LowStockAlertSerializer

    @action(detail=False, methods=["post"])
    def refresh(self, request):
        created = AlertService.derive_low_stock_alerts()
        return Response({"created": len(created)}, status=status.HTTP_200_OK)
