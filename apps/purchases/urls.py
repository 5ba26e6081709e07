from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import PurchaseViewSet, SupplierViewSet

app_name = 'purchases'

router = SimpleRouter()
router.register(r'suppliers', SupplierViewSet, basename='supplier')
router.register(r'orders', PurchaseViewSet, basename='purchase')

urlpatterns = [
    path('', include(router.urls)),
]
