import logging

from django.core.exceptions import ValidationError

from .models import AppSettings

logger = logging.getLogger(__name__)


class SettingsService:
    MODULE_POS = "pos_enabled"
    MODULE_MANAGEMENT = "management_enabled"
    MODULE_WEB_STORE = "web_store_enabled"
    VALID_MODULES = {MODULE_POS, MODULE_MANAGEMENT, MODULE_WEB_STORE}

    MODULE_LABELS = {
        MODULE_POS: "POS",
        MODULE_MANAGEMENT: "Management",
        MODULE_WEB_STORE: "Web store",
    }

    @staticmethod
    def get_settings():
        settings_obj, _ = AppSettings.objects.get_or_create(pk=AppSettings.SINGLETON_ID)
        return settings_obj

    @staticmethod
    def update_settings(**changes):
        settings_obj = SettingsService.get_settings()
        unknown = [key for key in changes if not hasattr(settings_obj, key)]
        if unknown:
            raise ValidationError({key: "Unknown setting." for key in unknown})

        for key, value in changes.items():
            setattr(settings_obj, key, value)
        settings_obj.full_clean()
        settings_obj.save()
        return settings_obj

    @staticmethod
    def is_module_enabled(module, settings_obj=None):
        if module not in SettingsService.VALID_MODULES:
            raise ValidationError({"module": "Invalid module."})
        settings_obj = settings_obj or SettingsService.get_settings()
        return bool(getattr(settings_obj, module))

    @staticmethod
    def toggle_module(module):
        if module not in SettingsService.VALID_MODULES:
            raise ValidationError({"module": "Invalid module."})

        settings_obj = SettingsService.get_settings()
        new_state = not getattr(settings_obj, module)
        setattr(settings_obj, module, new_state)
        settings_obj.save(update_fields=[module, "updated_at"])
        logger.info(
            "%s module %s",
            SettingsService.MODULE_LABELS[module],
            "enabled" if new_state else "disabled",
        )
        return settings_obj

    @staticmethod
    def module_states(settings_obj=None):
        settings_obj = settings_obj or SettingsService.get_settings()
        return {module: bool(getattr(settings_obj, module)) for module in sorted(SettingsService.VALID_MODULES)}
