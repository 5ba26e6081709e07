"""
POS counter endpoints, mounted at ``api/pos/``.
"""
from django.urls import path

from .views import PosCartItemView, PosCartView, PosCheckoutView, PosProductSearchView

app_name = 'pos'

urlpatterns = [
    path('products/', PosProductSearchView.as_view(), name='product-search'),
    path('cart/', PosCartView.as_view(), name='cart'),
    path('cart/items/', PosCartItemView.as_view(), name='cart-items'),
    path('checkout/', PosCheckoutView.as_view(), name='checkout'),
]
