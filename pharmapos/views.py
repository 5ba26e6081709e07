from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.system.services import SettingsService


@api_view(["GET"])
@permission_classes([AllowAny])
def api_root_view(request):
    settings_obj = SettingsService.get_settings()
    return Response(
        {
            "company": settings_obj.company_name,
            "currency": settings_obj.currency,
            "modules": SettingsService.module_states(settings_obj),
            "authenticated": request.user.is_authenticated,
        }
    )
