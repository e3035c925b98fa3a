from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Owner Orders"

    def ready(self):
        # Connects the ORDER_MANAGEMENT setting_changed receiver.
        from . import config  # noqa: F401
