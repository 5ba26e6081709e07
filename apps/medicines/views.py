"""
API views for medicines app.

Catalogue CRUD plus stock lookups (batches, FEFO order) per medicine.
"""
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.permissions import ModulePermission
from apps.inventory.serializers import BatchSerializer
from apps.inventory.services import StockService

from .models import Medicine
from .serializers import MedicineListSerializer, MedicineSerializer
from .services import MedicineService


class MedicineViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Medicine model.

    ``DELETE`` deactivates the medicine instead of removing the row.
    """

    queryset = Medicine.objects.all()
    permission_classes = [ModulePermission]
    permission_module = "inventory"
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "category", "created_at"]
    ordering = ["name"]

    def get_serializer_class(self):
        if self.action == "list":
            return MedicineListSerializer
        return MedicineSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        query = self.request.query_params.get("search")
        if query:
            queryset = MedicineService.search_medicines(query)

        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)

        include_inactive = self.request.query_params.get("include_inactive") == "true"
        if not include_inactive and self.action == "list":
            queryset = queryset.filter(is_active=True)

        return queryset

    def destroy(self, request, *args, **kwargs):
        MedicineService.deactivate(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def search(self, request):
        medicines = MedicineService.search_medicines(request.query_params.get("q", ""))[:50]
        serializer = MedicineListSerializer(medicines, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=["get"], url_path="barcode/(?P<barcode>[^/.]+)")
    def barcode(self, request, barcode=None):
        medicine = MedicineService.get_by_barcode(barcode)
        if medicine is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(MedicineSerializer(medicine).data)

    @action(detail=True, methods=["get"])
    def stock(self, request, pk=None):
        medicine = self.get_object()
        return Response({"medicine": medicine.id, "stock": StockService.get_medicine_stock(medicine.id)})

    @action(detail=True, methods=["get"])
    def batches(self, request, pk=None):
        medicine = self.get_object()
        batches = StockService.get_fefo_batches(medicine.id)
        suggested = batches[0] if batches else None
        return Response({
            "medicine": medicine.id,
            "suggested_batch": suggested.id if suggested else None,
            "batches": BatchSerializer(batches, many=True).data,
        })
