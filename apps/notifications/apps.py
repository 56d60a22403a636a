# apps/notifications/apps.py

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Notifications app configuration"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.notifications'
    verbose_name = 'Notifications - API & WebSockets'

    def ready(self):
        import logging
        logger = logging.getLogger(__name__)
        logger.info("Notifications app ready - WebSocket delivery enabled")
