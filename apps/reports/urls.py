"""
URL configuration for reports app.
"""
from django.urls import path

from . import views

app_name = 'reports'

urlpatterns = [
    path('dashboard/', views.DashboardStatsView.as_view(), name='dashboard'),
    path('kpis/', views.KpiView.as_view(), name='kpis'),
    path('sales/', views.SalesReportView.as_view(), name='sales'),
    path('profit/', views.ProfitReportView.as_view(), name='profit'),
    path('tax/', views.TaxReportView.as_view(), name='tax'),
    path('inventory/', views.InventoryReportView.as_view(), name='inventory'),
    path('expiry-risk/', views.ExpiryRiskView.as_view(), name='expiry-risk'),
    path('slow-movers/', views.SlowMoversView.as_view(), name='slow-movers'),
]
