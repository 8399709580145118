import logging
import re
from typing import Optional

from catalog.domain.exceptions import CategoryResolutionError

logger = logging.getLogger(__name__)

# RFC 4122 versions 1-5; some callers pass raw category ids where a slug is expected
UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


def looks_like_uuid(value: Optional[str]) -> bool:
    return bool(value) and bool(UUID_PATTERN.match(value))


class CategoryResolver:
    """
    Turns a category reference into a concrete category id.

    Resolution order, first match wins:

    1. an explicit id is used as-is, without a lookup;
    2. ``(slug, gender)`` when a gender is known, so slugs reused across
       genders resolve to the right one;
    3. slug only;
    4. a slug that is itself a UUID is taken as the id;
    5. otherwise there is no category (``None``).

    Store failures propagate as StoreError and are never reported as "no
    category".
    """

    def __init__(self, store):
        self.store = store

    def resolve(
        self,
        category_id: Optional[str] = None,
        slug: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> Optional[str]:
        if category_id:
            return str(category_id)

        if not slug:
            return None

        category = None
        if gender:
            category = self.store.find_category(slug, gender)
        if category is None:
            category = self.store.find_category(slug)
        if category is not None:
            return str(category.id)

        if looks_like_uuid(slug):
            logger.debug(f"Category slug '{slug}' is a UUID; using it as the id")
            return slug

        logger.info(f"No category for slug '{slug}' (gender={gender})")
        return None

    def require(
        self,
        category_id: Optional[str] = None,
        slug: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> str:
        """Like resolve(), but a missing category is a validation failure."""
        resolved = self.resolve(category_id=category_id, slug=slug, gender=gender)
        if resolved is None:
            raise CategoryResolutionError(category_id or slug or "")
        return resolved
