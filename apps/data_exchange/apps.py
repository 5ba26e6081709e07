from django.apps import AppConfig


class DataExchangeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.data_exchange"
    label = "data_exchange"
    verbose_name = "Data import/export"
