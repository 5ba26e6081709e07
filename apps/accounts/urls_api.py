"""
Staff authentication and user management, mounted at ``api/auth/``.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('login/', views.login_view, name='api-login'),
    path('logout/', views.logout_view, name='api-logout'),
    path('me/', views.current_user_view, name='api-current-user'),
    path('users/', views.UserListCreateView.as_view(), name='api-user-list'),
    path('users/<int:pk>/', views.UserDetailView.as_view(), name='api-user-detail'),
]
