from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"

    def ready(self):
        # Custom signals live in orders.signals; importing registers them early.
        import orders.signals  # noqa: F401
