import logging

from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler

from catalog.domain.services.validation import flatten_errors

logger = logging.getLogger(__name__)


def catalog_exception_handler(exc, context):
    """
    Render DRF errors in the catalog envelope.

    ``{"success": false, "error": "..."}``, plus ``details`` for validation
    errors. Exceptions DRF does not handle are left to Django.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        detail = exc.detail if isinstance(exc.detail, dict) else {"non_field_errors": exc.detail}
        response.data = {"success": False, "error": "Validation error", "details": flatten_errors(detail)}
    else:
        response.data = {"success": False, "error": str(getattr(exc, "detail", exc))}

    logger.info(f"{type(exc).__name__} on {context['request'].method} {context['request'].path}: {response.status_code}")
    return response
