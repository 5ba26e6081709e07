"""
API views for sales app.

Sales history and customers live under ``api/sales/``; the counter itself
(cart and checkout) lives under ``api/pos/`` so it can be switched off on
its own.
"""
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import ModulePermission
from apps.inventory.services import StockService
from apps.medicines.services import MedicineService

from .cart import PosCart, money
from .models import Customer, Sale
from .serializers import (
    CartAddSerializer,
    CartLineSerializer,
    CheckoutSerializer,
    CustomerSerializer,
    SaleListSerializer,
    SaleSerializer,
)
from .services import CartService, CustomerService, SaleService, SalesQueryService



class SaleViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Sale.objects.select_related("cashier", "customer").prefetch_related("items").all()
    permission_classes = [ModulePermission]
    permission_module = "sales"
    permission_actions = {"cancel": "update"}
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["invoice_number", "customer_name", "customer_phone"]
    ordering_fields = ["created_at", "total_amount"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.action == "list":
            return SaleListSerializer
        return SaleSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        start_date = self.request.query_params.get("start_date")
        end_date = self.request.query_params.get("end_date")
        if start_date:
            queryset = queryset.filter(created_at__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(created_at__date__lte=end_date)

        payment_method = self.request.query_params.get("payment_method")
        if payment_method:
            queryset = queryset.filter(payment_method=payment_method)

        return queryset

    @action(detail=False, methods=["get"])
    def today(self, request):
        sales = SalesQueryService.get_today_sales()
        return Response({
            "count": sales.count(),
            "total": money(sum((sale.total_amount for sale in sales), 0)),
            "sales": SaleListSerializer(sales, many=True).data,
        })

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        sale = SaleService.void_sale(self.get_object(), reason=request.data.get("reason", ""))
        return Response(SaleSerializer(sale).data)


class CustomerViewSet(viewsets.ModelViewSet):
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    permission_classes = [ModulePermission]
    permission_module = "customers"

    def get_queryset(self):
        query = self.request.query_params.get("search")
        if query:
            return CustomerService.search(query)
        return super().get_queryset()

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        customer.is_active = False
        customer.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)


class PosView(APIView):
    permission_classes = [ModulePermission]
    permission_module = "pos"

    def load_cart(self, request):
        return PosCart.from_session(request.session)


class PosProductSearchView(PosView):
    def get(self, request):
        medicines = MedicineService.search_medicines(request.query_params.get("q", ""))[:30]
        stock_map = StockService.get_stock_map([medicine.id for medicine in medicines])
        results = []
        for medicine in medicines:
            suggested = StockService.get_fefo_suggested_batch(medicine.id)
            results.append({
                "id": medicine.id,
                "name": medicine.name,
                "generic_name": medicine.generic_name,
                "strength": medicine.strength,
                "barcode": medicine.barcode,
                "classification": medicine.classification,
                "stock": stock_map.get(medicine.id, 0),
                "suggested_batch": suggested.id if suggested else None,
                "price": suggested.sale_price if suggested else None,
            })
        return Response(results)


class PosCartView(PosView):
    permission_actions = {"DELETE": "create"}

    def get(self, request):
        return Response(self.load_cart(request).to_dict())

    def delete(self, request):
        cart = self.load_cart(request)
        cart.clear()
        cart.save_to_session(request.session)
        return Response(cart.to_dict())


class PosCartItemView(PosView):
    """
    ``POST`` adds units (FEFO unless ``batch_id`` is given), ``PATCH`` sets a
    line's quantity, ``DELETE`` removes a line.
    """

    permission_actions = {"PATCH": "create", "DELETE": "create"}

    def post(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        lines = CartService.add_medicine(cart, **serializer.validated_data)
        cart.save_to_session(request.session)
        data = cart.to_dict()
        data["fefo_override"] = any(line.fefo_override for line in lines)
        return Response(data, status=status.HTTP_201_CREATED)

    def patch(self, request):
        serializer = CartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        CartService.update_quantity(cart, **serializer.validated_data)
        cart.save_to_session(request.session)
        return Response(cart.to_dict())

    def delete(self, request):
        serializer = CartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        data = serializer.validated_data
        CartService.remove_line(cart, data["medicine_id"], data["batch_id"])
        cart.save_to_session(request.session)
        return Response(cart.to_dict())


class PosCheckoutView(PosView):
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        sale = SaleService.complete_sale(cart, cashier=request.user, **serializer.validated_data)
        cart.save_to_session(request.session)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
