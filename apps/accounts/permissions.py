from rest_framework.permissions import BasePermission

from .models import ACTION_CREATE, ACTION_DELETE, ACTION_READ, ACTION_UPDATE


METHOD_ACTIONS = {
    "GET": ACTION_READ,
    "HEAD": ACTION_READ,
    "OPTIONS": ACTION_READ,
    "POST": ACTION_CREATE,
    "PUT": ACTION_UPDATE,
    "PATCH": ACTION_UPDATE,
    "DELETE": ACTION_DELETE,
}


def _has_module_permission(user, module, action):
    return bool(getattr(user, "has_permission", lambda *_: False)(module, action))


class ModulePermission(BasePermission):
    """
    Map the request method to a create/read/update/delete action on the view's
    ``permission_module``. Views may override single viewset actions or
    HTTP methods through ``permission_actions = {"resolve": "update"}``.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        module = getattr(view, "permission_module", None)
        if module is None:
            return True

        overrides = getattr(view, "permission_actions", {}) or {}
        action = (
            overrides.get(getattr(view, "action", None))
            or overrides.get(request.method)
            or METHOD_ACTIONS.get(request.method, ACTION_READ)
        )
        return _has_module_permission(user, module, action)


class IsSuperAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "is_superadmin", lambda: False)())


class CanManageUsers(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "has_full_access", lambda: False)())
