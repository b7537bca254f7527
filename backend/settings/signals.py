"""
Signal handlers for the settings app.
Keeps the configuration cache in step with RestaurantSettings.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import RestaurantSettings
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=RestaurantSettings)
def reload_app_settings(sender, instance, **kwargs):
    """
    Invalidate the AppSettings cache when RestaurantSettings are saved so the
    next read picks up the new values.
    """
    from .config import app_settings

    app_settings.invalidate()
    logger.info("Restaurant settings changed, configuration cache invalidated")
