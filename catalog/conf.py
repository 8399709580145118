"""
Catalog settings with defaults.

Projects override any key through the ``CATALOG`` dict in Django settings:

    CATALOG = {
        "DEFAULT_BRAND": "MHCloth",
        "MAX_IMAGES": 10,
    }
"""

from typing import Any

from django.conf import settings


DEFAULTS = {
    "DEFAULT_BRAND": "MHCloth",
    # Image set limits
    "MAX_IMAGES": 10,
    "MAX_IMAGE_BYTES": 5 * 1024 * 1024,
    "ALLOWED_IMAGE_TYPES": ("image/jpeg", "image/png", "image/webp"),
    "IMAGE_KEY_PREFIX": "products",
    # Identifier allocation
    "MAX_SLUG_SUFFIX": 100,
    "MAX_INSERT_ATTEMPTS": 5,
    "MAX_SKU_CANDIDATES": 1000,
    # Whole-request budget for a create
    "REQUEST_DEADLINE_SECONDS": 30.0,
    # Upstream admin gate
    "ADMIN_SESSION_COOKIE": "admin_session",
    "STORE_ACCESS_COOKIE": "sb-access-token",
    # Listing
    "DEFAULT_PAGE_SIZE": 24,
    "MAX_PAGE_SIZE": 100,
}


def catalog_setting(name: str) -> Any:
    overrides = getattr(settings, "CATALOG", {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
