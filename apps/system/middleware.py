from django.http import JsonResponse

from .services import SettingsService


class ModuleToggleMiddleware:
    """
    Hide the route trees of disabled modules.

    A disabled module answers 404 as if its routes were never mounted, so the
    storefront, POS and back office can be switched off from the super-admin
    panel without a redeploy.
    """

    MODULE_PREFIXES = (
        ("/api/store/", SettingsService.MODULE_WEB_STORE),
        ("/api/pos/", SettingsService.MODULE_POS),
        ("/api/medicines/", SettingsService.MODULE_MANAGEMENT),
        ("/api/inventory/", SettingsService.MODULE_MANAGEMENT),
        ("/api/purchases/", SettingsService.MODULE_MANAGEMENT),
        ("/api/reports/", SettingsService.MODULE_MANAGEMENT),
        ("/api/data/", SettingsService.MODULE_MANAGEMENT),
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def _module_for_path(self, path):
        for prefix, module in self.MODULE_PREFIXES:
            if path.startswith(prefix):
                return module
        return None

    def __call__(self, request):
        module = self._module_for_path(request.path)
        if module is not None and not SettingsService.is_module_enabled(module):
            return JsonResponse({"detail": "Not found."}, status=404)
        return self.get_response(request)
