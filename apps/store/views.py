"""
Public storefront API.

Everything under ``api/store/`` is open to anonymous visitors; the cart and
the signed-in web customer live in the session. Staff manage web orders
through ``api/store/manage/orders/``.
"""
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import ModulePermission

from .cart import WebCart
from .models import WebOrder
from .serializers import (
    ProductSerializer,
    WebCartAddSerializer,
    WebCartRemoveSerializer,
    WebCartUpdateSerializer,
    WebCustomerSerializer,
    WebOrderSerializer,
    WebOrderStatusSerializer,
)
from .services import (
    CheckoutService,
    OrderTrackingService,
    StorefrontService,
    WebAuthService,
    WebCartService,
)


class StoreView(APIView):
    # Visitors are identified by session only.
    authentication_classes = []
    permission_classes = [AllowAny]

    def load_cart(self, request):
        return WebCart.from_session(request.session)


class ProductListView(StoreView):
    def get(self, request):
        products = StorefrontService.list_products(
            query=request.query_params.get("q", ""),
            category=request.query_params.get("category", ""),
            sort=request.query_params.get("sort", StorefrontService.SORT_NAME),
        )
        return Response(ProductSerializer(products, many=True).data)


class ProductDetailView(StoreView):
    def get(self, request, pk):
        product = StorefrontService.get_product(pk)
        if product is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProductSerializer(product).data)


class CategoryListView(StoreView):
    def get(self, request):
        return Response(StorefrontService.categories())


class CartView(StoreView):
    def get(self, request):
        return Response(self.load_cart(request).to_dict())

    def delete(self, request):
        cart = self.load_cart(request)
        cart.clear()
        cart.save_to_session(request.session)
        return Response(cart.to_dict())


class CartItemView(StoreView):
    def post(self, request):
        serializer = WebCartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        WebCartService.add(cart, **serializer.validated_data)
        cart.save_to_session(request.session)
        return Response(cart.to_dict(), status=status.HTTP_201_CREATED)

    def patch(self, request):
        serializer = WebCartUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        cart.update(**serializer.validated_data)
        cart.save_to_session(request.session)
        return Response(cart.to_dict())

    def delete(self, request):
        serializer = WebCartRemoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.load_cart(request)
        cart.remove(serializer.validated_data["medicine_id"])
        cart.save_to_session(request.session)
        return Response(cart.to_dict())


class CheckoutView(StoreView):
    def get(self, request):
        return Response({
            "cart": self.load_cart(request).to_dict(),
            "payment_methods": CheckoutService.available_payment_methods(),
        })

    def post(self, request):
        cart = self.load_cart(request)
        customer = WebAuthService.current_customer(request)
        order = CheckoutService.place_order(cart, request.data, customer=customer)
        cart.save_to_session(request.session)
        return Response(WebOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class TrackOrderView(StoreView):
    def get(self, request):
        orders = OrderTrackingService.track(request.query_params.get("q", ""))
        return Response(WebOrderSerializer(orders, many=True).data)


class SignupView(StoreView):
    def post(self, request):
        data = request.data
        errors = WebAuthService.validate(
            data.get("email"),
            data.get("password"),
            confirm_password=data.get("confirm_password"),
            name=data.get("name"),
            signup=True,
        )
        if errors:
            return Response({"errors": errors}, status=status.HTTP_400_BAD_REQUEST)
        if not WebAuthService.signup(request, data["name"], data["email"], data["password"], data.get("phone", "")):
            return Response(
                {"errors": {"email": "An account with this email already exists"}},
                status=status.HTTP_400_BAD_REQUEST,
            )
        customer = WebAuthService.current_customer(request)
        return Response(WebCustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


class LoginView(StoreView):
    def post(self, request):
        errors = WebAuthService.validate(request.data.get("email"), request.data.get("password"))
        if errors:
            return Response({"errors": errors}, status=status.HTTP_400_BAD_REQUEST)
        if not WebAuthService.login(request, request.data["email"], request.data["password"]):
            return Response({"error": "Invalid email or password"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(WebCustomerSerializer(WebAuthService.current_customer(request)).data)


class LogoutView(StoreView):
    def post(self, request):
        WebAuthService.logout(request)
        return Response({"message": "Logged out"})


class MeView(StoreView):
    def get(self, request):
        customer = WebAuthService.current_customer(request)
        if customer is None:
            return Response({"detail": "Not signed in."}, status=status.HTTP_401_UNAUTHORIZED)
        data = WebCustomerSerializer(customer).data
        data["orders"] = WebOrderSerializer(customer.orders.prefetch_related("items"), many=True).data
        return Response(data)


class WebOrderManageViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = WebOrder.objects.prefetch_related("items").all()
    serializer_class = WebOrderSerializer
    permission_classes = [ModulePermission]
    permission_module = "sales"
    permission_actions = {"set_status": "update"}
    lookup_field = "order_id"

    def get_queryset(self):
        queryset = super().get_queryset()
        order_status = self.request.query_params.get("status")
        if order_status:
            queryset = queryset.filter(order_status=order_status)
        return queryset

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, order_id=None):
        serializer = WebOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderTrackingService.update_status(self.get_object(), serializer.validated_data["order_status"])
        return Response(WebOrderSerializer(order).data)
