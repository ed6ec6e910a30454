"""
Core app configuration.
"""
import logging
from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        """Validate the access-control configuration at startup."""
        self._validate_access_control_settings()

    def _validate_access_control_settings(self):
        config = getattr(settings, 'ACCESS_CONTROL', {})
        if not isinstance(config, dict):
            raise ImproperlyConfigured("ACCESS_CONTROL must be a dict.")

        default_allow = config.get('SUB_ITEM_DEFAULT_ALLOW', True)
        if not isinstance(default_allow, bool):
            raise ImproperlyConfigured(
                "ACCESS_CONTROL['SUB_ITEM_DEFAULT_ALLOW'] must be True or False, "
                f"got {default_allow!r}."
            )
        if not default_allow:
            logger.info("Unlisted navigation sub-items are denied by default")
