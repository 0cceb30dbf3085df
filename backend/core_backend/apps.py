from django.apps import AppConfig
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"

    def ready(self):
        """
        Report missing payment configuration once at startup. Payment routes
        still fail per request with ConfigurationError; the menu and cart keep working.
        """
        missing = [
            name
            for name in ("STRIPE_SECRET_KEY", "STRIPE_PUBLISHABLE_KEY", "STRIPE_WEBHOOK_SECRET")
            if not getattr(settings, name, "")
        ]
        if missing:
            logger.warning(f"Payment provider not fully configured, missing: {', '.join(missing)}")
