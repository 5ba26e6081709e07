from django.urls import path
from rest_framework.routers import SimpleRouter

from . import views

app_name = "store"

router = SimpleRouter()
router.register(r'manage/orders', views.WebOrderManageViewSet, basename='web-order')

urlpatterns = [
    path('products/', views.ProductListView.as_view(), name='product-list'),
    path('products/<int:pk>/', views.ProductDetailView.as_view(), name='product-detail'),
    path('categories/', views.CategoryListView.as_view(), name='category-list'),
    path('cart/', views.CartView.as_view(), name='cart'),
    path('cart/items/', views.CartItemView.as_view(), name='cart-items'),
    path('checkout/', views.CheckoutView.as_view(), name='checkout'),
    path('orders/track/', views.TrackOrderView.as_view(), name='track-order'),
    path('auth/signup/', views.SignupView.as_view(), name='signup'),
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/logout/', views.LogoutView.as_view(), name='logout'),
    path('auth/me/', views.MeView.as_view(), name='me'),
] + router.urls
