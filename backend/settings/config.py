"""
Centralized configuration management using the Singleton pattern.
This module provides a single point of access to the restaurant settings,
eliminating the need for direct database queries from business logic.
"""

from decimal import Decimal
from typing import Optional, Any
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
import logging

logger = logging.getLogger(__name__)


class AppSettings:
    """
    A LAZY singleton class that provides centralized access to restaurant settings.
    It defers database loading until the first setting is accessed, allowing management
    commands like 'migrate' to run before the database schema is up to date.
    """

    _instance: Optional["AppSettings"] = None

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.__dict__["_initialized"] = False
        return cls._instance

    def __getattr__(self, name: str) -> Any:
        """
        Lazily loads settings on first access, then retrieves the attribute.
        """
        if not self.__dict__.get("_initialized"):
            self.load_settings()

        # Guard against infinite recursion for attributes that truly don't exist.
        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        """
        Load settings from the database and populate instance attributes.
        """
        from .models import RestaurantSettings

        try:
            settings_obj = RestaurantSettings.load()
        except DatabaseError as e:
            raise ImproperlyConfigured(f"Failed to load settings: {e}")

        # === PRICING ===
        self.currency: str = settings_obj.currency
        self.tax_rate: Decimal = settings_obj.tax_rate
        self.delivery_fee: Decimal = settings_obj.delivery_fee
        self.min_order_amount: Decimal = settings_obj.min_order_amount

        # === LOYALTY ===
        self.enable_loyalty_points: bool = settings_obj.enable_loyalty_points
        self.loyalty_points_per_dollar: Decimal = settings_obj.loyalty_points_per_dollar
        self.loyalty_points_for_free: int = settings_obj.loyalty_points_for_free

        # === NOTIFICATIONS ===
        self.enable_email_notifications: bool = settings_obj.enable_email_notifications
        self.enable_sms_notifications: bool = settings_obj.enable_sms_notifications

        # === OPERATIONS ===
        self.restaurant_name: str = settings_obj.name
        self.restaurant_address: dict = settings_obj.address or {}
        self.auto_accept_orders: bool = settings_obj.auto_accept_orders
        self.latitude: Optional[Decimal] = settings_obj.latitude
        self.longitude: Optional[Decimal] = settings_obj.longitude
        self.delivery_radius_miles: Decimal = settings_obj.delivery_radius_miles
        self.average_prep_minutes: int = settings_obj.average_prep_minutes

        self.__dict__["_initialized"] = True

    def reload(self) -> None:
        """
        Reload settings from the database.
        This method is called when settings are updated to refresh the cache.
        """
        self.load_settings()
        logger.info("AppSettings cache reloaded")

    def invalidate(self) -> None:
        """Drop the cached values; the next attribute access reloads them."""
        self.__dict__.clear()
        self.__dict__["_initialized"] = False

    def __repr__(self):
        if not self.__dict__.get("_initialized"):
            return "<AppSettings (not loaded)>"
        return (
            f"<AppSettings tax_rate={self.tax_rate} delivery_fee={self.delivery_fee} "
            f"loyalty={self.enable_loyalty_points}>"
        )


# Create a single, globally accessible instance of the settings.
app_settings = AppSettings()
