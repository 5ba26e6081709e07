"""
URL configuration for the PharmaPOS project.

Route trees:
- admin/POS API (authenticated staff)
- public storefront API under ``api/store/`` (omitted when the web store is disabled)
- super-admin module panel under ``api/superadmin/``
"""
from django.contrib import admin
from django.urls import include, path

from pharmapos.views import api_root_view

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", api_root_view, name="api-root"),

    # Staff / back office
    path("api/auth/", include("apps.accounts.urls_api")),
    path("api/medicines/", include("apps.medicines.urls")),
    path("api/inventory/", include("apps.inventory.urls")),
    path("api/purchases/", include("apps.purchases.urls")),
    path("api/sales/", include("apps.sales.urls")),
    path("api/pos/", include("apps.sales.urls_pos")),
    path("api/reports/", include("apps.reports.urls")),
    path("api/data/", include("apps.data_exchange.urls")),

    # Storefront
    path("api/store/", include("apps.store.urls")),

    # Super admin
    path("api/superadmin/", include("apps.system.urls")),
]
