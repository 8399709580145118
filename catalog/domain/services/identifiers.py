"""
Slug and SKU allocation.

Both identifiers are unique in the catalog table. The allocators here propose
candidates; the unique indexes are what guarantee uniqueness, and the catalog
writer asks for a new candidate whenever an insert collides.
"""

import logging
import re
import string
import time
import uuid
from typing import Optional

from django.utils.crypto import get_random_string

from catalog.conf import catalog_setting
from catalog.domain.exceptions import SlugAllocationError, StoreError
from catalog.infra.observability.metrics import sku_generator_fallbacks_total

logger = logging.getLogger(__name__)

_DISALLOWED_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")

SKU_TOKEN_CHARS = string.ascii_lowercase + string.digits


def slugify(value: str) -> str:
    """
    Derive a URL-safe slug from a product name.

    >>> slugify("Air Jordan 8!")
    'air-jordan-8'

    Never returns an empty string: names with no usable characters get a
    random UUID instead.
    """
    slug = (value or "").lower().strip()
    slug = _DISALLOWED_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug or str(uuid.uuid4())


def slug_suffix(base: str, candidate: str) -> int:
    """Return N for ``base-N`` candidates, 1 for the bare base."""
    if candidate == base:
        return 1
    return int(candidate[len(base) + 1 :])


class SlugAllocator:
    def __init__(self, store, max_suffix: Optional[int] = None):
        self.store = store
        self.max_suffix = max_suffix or catalog_setting("MAX_SLUG_SUFFIX")

    def ensure_unique_slug(
        self, base: str, start_suffix: Optional[int] = None, exclude_id: Optional[str] = None
    ) -> str:
        """
        Return the first free candidate among ``base``, ``base-2``, ``base-3``, ...

        Args:
            base: Slug from slugify()
            start_suffix: First numeric suffix to try. When given, the bare
                base is skipped (it is already known to be taken).
            exclude_id: Product being renamed; its own slug counts as free

        Raises:
            SlugAllocationError: every candidate up to the suffix bound is taken
            StoreError: the existence lookup failed
        """
        if start_suffix is None:
            if not self._taken(base, exclude_id):
                return base
            start_suffix = 2

        for suffix in range(max(start_suffix, 2), self.max_suffix + 1):
            candidate = f"{base}-{suffix}"
            if not self._taken(candidate, exclude_id):
                return candidate

        logger.error(f"Slug allocation exhausted for base '{base}' (max suffix {self.max_suffix})")
        raise SlugAllocationError(f"No free slug for '{base}' within {self.max_suffix} candidates")

    def _taken(self, candidate: str, exclude_id: Optional[str]) -> bool:
        if exclude_id is None:
            return self.store.slug_exists(candidate)
        return self.store.slug_exists(candidate, exclude_id=exclude_id)

    def next_after_conflict(self, base: str, taken: str) -> str:
        """Allocate again, starting after the candidate that just collided on insert."""
        return self.ensure_unique_slug(base, start_suffix=slug_suffix(base, taken) + 1)


def sku_prefix(source: str) -> str:
    """
    Three-letter uppercase SKU prefix from a gender or category string.

    >>> sku_prefix("mens")
    'MEN'
    """
    letters = _NON_ALNUM.sub("", source or "").upper()[:3]
    return letters or "SKU"


def fallback_sku(prefix: str) -> str:
    """
    Locally synthesized SKU: ``PREFIX-<ms timestamp>-<6 char token>``.

    Unique by construction only (timestamp plus random token); nothing checks
    it against the catalog, the unique index does.
    """
    token = get_random_string(6, allowed_chars=SKU_TOKEN_CHARS)
    return f"{prefix}-{int(time.time() * 1000)}-{token}"


class SkuAllocator:
    def __init__(self, store):
        self.store = store

    def allocate(self, prefix_source: str, requested_sku: Optional[str] = None) -> str:
        """
        Choose the SKU for a new product.

        A requested SKU that is still free is kept as-is. A taken one becomes
        the base for the store-side generator, which disambiguates it.
        """
        prefix = sku_prefix(prefix_source)
        requested = (requested_sku or "").strip() or None

        if requested and not self.store.sku_exists(requested):
            return requested

        return self.generate(prefix, requested)

    def reallocate(self, prefix_source: str, conflicting_sku: str) -> str:
        """New SKU after an insert collided on ``conflicting_sku``."""
        return self.generate(sku_prefix(prefix_source), conflicting_sku)

    def generate(self, prefix: str, base_sku: Optional[str] = None) -> str:
        try:
            return self.store.generate_unique_sku(prefix, base_sku)
        except StoreError as e:
            sku_generator_fallbacks_total.inc()
            sku = fallback_sku(prefix)
            logger.warning(f"SKU generator unavailable ({e}); using fallback SKU {sku}")
            return sku
