# apps/analytics/apps.py

from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    """Analytics app configuration"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.analytics'
    verbose_name = 'Analytics - Dashboard & Progress'

    def ready(self):
        import logging
        logger = logging.getLogger(__name__)
        logger.info("Analytics app ready")
