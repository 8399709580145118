import logging

from django.apps import AppConfig
from django.conf import settings


logger = logging.getLogger(__name__)


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"

    def ready(self):
        tracing = getattr(settings, "TRACING", {})
        if not tracing.get("ENABLED"):
            return

        from catalog.infra.observability.tracing import setup_tracing

        setup_tracing(
            service_name=tracing.get("SERVICE_NAME", "catalog-service"),
            otlp_endpoint=tracing.get("OTLP_ENDPOINT"),
        )
