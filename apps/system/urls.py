from django.urls import path

from .views import module_list_view, module_toggle_view, settings_view

urlpatterns = [
    path("settings/", settings_view, name="system-settings"),
    path("modules/", module_list_view, name="system-modules"),
    path("modules/<str:module>/toggle/", module_toggle_view, name="system-module-toggle"),
]
