from rest_framework import serializers

from .models import AppSettings


class AppSettingsSerializer(serializers.ModelSerializer):
    expiry_alert_days = serializers.DictField(read_only=True)

    class Meta:
        model = AppSettings
        exclude = ["id"]
        read_only_fields = ["updated_at", "pos_enabled", "management_enabled", "web_store_enabled"]

    def validate(self, attrs):
        critical = attrs.get("expiry_critical_days", getattr(self.instance, "expiry_critical_days", 30))
        warning = attrs.get("expiry_warning_days", getattr(self.instance, "expiry_warning_days", 60))
        notice = attrs.get("expiry_notice_days", getattr(self.instance, "expiry_notice_days", 90))
        if not (critical <= warning <= notice):
            raise serializers.ValidationError(
                {"expiry_warning_days": "Alert days must satisfy critical <= warning <= notice."}
            )
        return attrs
