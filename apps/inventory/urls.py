"""
URL configuration for inventory app.
"""
from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import BatchViewSet, ExpiryAlertViewSet, LowStockAlertViewSet

app_name = 'inventory'

router = SimpleRouter()
router.register(r'batches', BatchViewSet, basename='batch')
router.register(r'expiry-alerts', ExpiryAlertViewSet, basename='expiry-alert')
router.register(r'low-stock-alerts', LowStockAlertViewSet, basename='low-stock-alert')

urlpatterns = [
    path('', include(router.urls)),
]
