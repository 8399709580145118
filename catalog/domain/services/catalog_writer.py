import logging
from typing import List, Optional

from catalog.conf import catalog_setting
from catalog.domain.exceptions import StoreError, UniqueConstraintViolation
from catalog.domain.models import Product
from catalog.infra.observability.metrics import insert_conflicts_total

from .identifiers import SkuAllocator, SlugAllocator, slugify
from .validation import ProductDraft

logger = logging.getLogger(__name__)


class CatalogWriter:
    """
    Writes product rows.

    The slug and SKU handed to insert are only candidates: when the insert
    collides on either unique index, the writer allocates the next candidate
    and tries again, up to ``MAX_INSERT_ATTEMPTS`` inserts.
    """

    def __init__(self, store, slug_allocator: SlugAllocator, sku_allocator: SkuAllocator, max_attempts: Optional[int] = None):
        self.store = store
        self.slugs = slug_allocator
        self.skus = sku_allocator
        self.max_attempts = max_attempts or catalog_setting("MAX_INSERT_ATTEMPTS")

    def create(
        self,
        draft: ProductDraft,
        category_id: str,
        sku: str,
        status: str,
        subcategory_id: Optional[str] = None,
    ) -> Product:
        """
        Insert the product without images.

        Args:
            draft: Validated submission
            category_id: Resolved category id
            sku: Allocated SKU candidate
            status: Status the row is inserted with
            subcategory_id: Optional resolved subcategory id

        Raises:
            UniqueConstraintViolation: still colliding after the last attempt
            StoreError: allocation or insert failed
        """
        base_slug = slugify(draft.name)
        slug = self.slugs.ensure_unique_slug(base_slug)
        prefix_source = draft.gender or "SKU"

        for attempt in range(1, self.max_attempts + 1):
            values = draft.row_values()
            values.update(
                slug=slug,
                sku=sku,
                status=status,
                category_id=category_id,
                subcategory_id=subcategory_id,
                image_urls=[],
            )
            try:
                product = self.store.insert(values)
            except UniqueConstraintViolation as e:
                insert_conflicts_total.labels(field=e.field).inc()
                if attempt == self.max_attempts:
                    logger.error(f"Giving up on insert of '{draft.name}' after {attempt} conflicts (last on {e.field})")
                    raise
                logger.info(f"Insert attempt {attempt} collided on {e.field} '{e.value}'; retrying")
                if e.field == "slug":
                    slug = self.slugs.next_after_conflict(base_slug, slug)
                elif e.field == "sku":
                    sku = self.skus.reallocate(prefix_source, sku)
                else:
                    raise StoreError(str(e)) from e
                continue

            logger.info(f"Inserted product {product.id} (slug={product.slug}, sku={product.sku})")
            return product

        raise StoreError(f"Insert of '{draft.name}' was not attempted")

    def attach_images(self, product_id: str, urls: List[str], status: Optional[str] = None) -> Product:
        """
        Set the product's image list, and the deferred status when given.

        Setting the same values twice leaves the row unchanged.

        Raises:
            StoreError: the update failed
        """
        values = {"image_urls": list(urls)}
        if status is not None:
            values["status"] = status
        product = self.store.update(product_id, values)
        logger.info(f"Attached {len(urls)} image(s) to product {product_id}")
        return product
