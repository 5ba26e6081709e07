from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.accounts.permissions import CanManageUsers, IsSuperAdmin

from .serializers import AppSettingsSerializer
from .services import SettingsService


@api_view(["GET", "PATCH"])
@permission_classes([permissions.IsAuthenticated])
def settings_view(request):
    settings_obj = SettingsService.get_settings()
    if request.method == "GET":
        return Response(AppSettingsSerializer(settings_obj).data)

    if not CanManageUsers().has_permission(request, None):
        return Response({"detail": "Only the owner can change settings."}, status=status.HTTP_403_FORBIDDEN)

    serializer = AppSettingsSerializer(settings_obj, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(["GET"])
@permission_classes([IsSuperAdmin])
def module_list_view(request):
    return Response(SettingsService.module_states())


@api_view(["POST"])
@permission_classes([IsSuperAdmin])
def module_toggle_view(request, module):
    SettingsService.toggle_module(module)
    return Response(SettingsService.module_states())
