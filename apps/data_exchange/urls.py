"""
URL configuration for data exchange app.
"""
from django.urls import path

from .views import ExportView, ImportView, TemplateView

app_name = 'data_exchange'

urlpatterns = [
    path('export/<str:entity>/', ExportView.as_view(), name='export'),
    path('import/<str:entity>/', ImportView.as_view(), name='import'),
    path('templates/<str:entity>/', TemplateView.as_view(), name='template'),
]
