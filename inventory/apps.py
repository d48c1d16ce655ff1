"""Django app configuration for the inventory (stock reservation) app."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """AppConfig for stock reservations."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
