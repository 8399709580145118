"""
ProductIngestionService - Product create & update pipeline

Validates a submission, resolves its category, allocates slug and SKU,
inserts the product row, uploads its images and attaches their URLs.

The row and the image objects live in two stores with no shared
transaction. Once the row exists, any later failure hands the row id and the
uploaded keys to the Compensator before the error is returned, so a failed
create leaves neither a row nor orphaned objects behind.

A product submitted with images is inserted as a draft; its requested status
is applied in the same update that attaches the image URLs, so it is never
publicly listed without them.

Updates upload new images first and then write every change in one row
update. A failed update removes only its own uploads; images the product
drops are removed once the update is stored.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from catalog.domain.exceptions import (
    CatalogError,
    CategoryResolutionError,
    ProductNotFoundError,
    ProductValidationError,
    UniqueConstraintViolation,
)
from catalog.domain.models import Product, ProductStatus
from catalog.infra.observability.metrics import (
    product_ingestion_duration,
    product_ingestions_total,
    product_updates_total,
)
from catalog.infra.observability.tracing import get_tracer
from infrastructure.container import container
from utils.logging_utils import sanitize_payload

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from .catalog_writer import CatalogWriter
from .category_resolver import CategoryResolver
from .compensator import Compensator
from .deadline import Deadline
from .identifiers import SkuAllocator, SlugAllocator, slugify
from .image_ingestor import ImageIngestor, UploadBatch
from .validation import LOGGED_FIELDS, ProductChanges, ProductSubmissionValidator

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

OUTCOME_CREATED = "created"
OUTCOME_UPDATED = "updated"


@dataclass
class CreatedProduct:
    id: str
    slug: str

    def to_dict(self) -> dict:
        return {"id": self.id, "slug": self.slug}


def error_result(error: CatalogError) -> ServiceResult:
    """Failed ServiceResult carrying the exception's code and field details."""
    return service_err(error.code, str(error), getattr(error, "details", None))


class ProductIngestionService(BaseService):
    """
    Service for creating and updating products.

    Responsibilities:
    - Validate multipart or JSON submissions
    - Resolve the category reference (gender-scoped first)
    - Allocate a unique slug and SKU
    - Insert the row, upload images, attach image URLs
    - Roll back the row and uploaded objects on any failure after insert
    - Apply partial updates, re-slugging on rename and merging kept and new images

    Returns ServiceResult; error codes come from ErrorCodes.
    """

    def __init__(self, store=None, storage=None, deadline_factory=None):
        """
        Initialize ProductIngestionService.

        Args:
            store: Catalog store (injected via DI container)
            storage: Object storage for images (injected via DI container)
            deadline_factory: Callable returning a fresh Deadline per request
        """
        super().__init__()
        self.store = store or container.catalog_store()
        self.storage = storage or container.storage()
        self.deadline_factory = deadline_factory or Deadline.from_settings

        self.validator = ProductSubmissionValidator()
        self.resolver = CategoryResolver(self.store)
        self.slugs = SlugAllocator(self.store)
        self.skus = SkuAllocator(self.store)
        self.writer = CatalogWriter(self.store, self.slugs, self.skus)
        self.images = ImageIngestor(self.storage)
        self.compensator = Compensator(self.store, self.storage)

    @BaseService.log_performance
    def create_product(
        self, data: Any, files: Sequence[Any] = (), multipart: bool = False
    ) -> ServiceResult[CreatedProduct]:
        """
        Create a product from a submission.

        Args:
            data: Form fields (multipart) or the decoded JSON body
            files: Uploaded image files in receipt order (multipart only)
            multipart: Whether ``data`` came from a multipart form

        Returns:
            ServiceResult with CreatedProduct(id, slug)

        Example:
            >>> result = ingestion_service.create_product(request.data, request.FILES.getlist("images"), True)
            >>> if result.ok:
            ...     print(result.value.slug)
        """
        started = time.monotonic()

        try:
            with tracer.start_as_current_span("catalog.create_product") as span:
                created = self._create(data, files, multipart, self.deadline_factory())
                span.set_attribute("catalog.product_id", created.id)
        except CatalogError as e:
            result = error_result(e)
        except Exception as e:
            self.logger.error(f"Unexpected error creating product: {e}", exc_info=True)
            result = service_err(ErrorCodes.INTERNAL_ERROR, "Internal server error")
        else:
            result = service_ok(created)

        product_ingestions_total.labels(outcome=OUTCOME_CREATED if result.ok else result.error).inc()
        product_ingestion_duration.observe(time.monotonic() - started)
        return result

    @BaseService.log_performance
    def update_product(
        self, product_id: str, data: Any, files: Sequence[Any] = (), multipart: bool = False
    ) -> ServiceResult[Product]:
        """
        Apply a partial update to a product.

        Only the fields present in ``data`` change. A new name re-allocates
        the slug. New image files are uploaded under the product's prefix and
        appended after the kept ``image_urls``.

        Returns:
            ServiceResult with the updated Product
        """
        try:
            with tracer.start_as_current_span("catalog.update_product") as span:
                span.set_attribute("catalog.product_id", str(product_id))
                product = self._update(product_id, data, files, multipart, self.deadline_factory())
        except CatalogError as e:
            result = error_result(e)
        except Exception as e:
            self.logger.error(f"Unexpected error updating product {product_id}: {e}", exc_info=True)
            result = service_err(ErrorCodes.INTERNAL_ERROR, "Internal server error")
        else:
            result = service_ok(product)

        product_updates_total.labels(outcome=OUTCOME_UPDATED if result.ok else result.error).inc()
        return result

    def _create(self, data: Any, files: Sequence[Any], multipart: bool, deadline: Deadline) -> CreatedProduct:
        with tracer.start_as_current_span("catalog.validate"):
            submission = self.validator.validate(data, files, multipart)
            self.images.validate(submission.images)
        draft = submission.draft
        self.logger.info(f"Creating product {sanitize_payload(vars(draft), LOGGED_FIELDS)}")

        deadline.check("category resolution")
        with tracer.start_as_current_span("catalog.resolve_category"):
            category_id = self.resolver.require(draft.category_id, draft.category_slug, draft.gender)
            subcategory_id = self._check_subcategory(draft.subcategory_id)

        deadline.check("SKU allocation")
        sku = self.skus.allocate(draft.gender, draft.sku)

        deadline.check("insert")
        status = ProductStatus.DRAFT if submission.has_images else draft.status
        with tracer.start_as_current_span("catalog.insert"):
            product = self.writer.create(draft, category_id, sku, status, subcategory_id)
        product_id = str(product.id)

        batch = UploadBatch()
        try:
            if submission.has_images:
                with tracer.start_as_current_span("catalog.upload_images"):
                    self.images.ingest(product_id, submission.images, deadline=deadline, batch=batch)
                deadline.check("image attach")
                with tracer.start_as_current_span("catalog.attach_images"):
                    self.writer.attach_images(product_id, draft.image_urls + batch.urls, status=draft.status)
        except Exception as e:
            self.compensator.compensate(product_id, batch.paths, reason=f"{type(e).__name__}: {e}")
            raise

        return CreatedProduct(id=product_id, slug=product.slug)

    def _update(self, product_id: str, data: Any, files: Sequence[Any], multipart: bool, deadline: Deadline) -> Product:
        with tracer.start_as_current_span("catalog.validate"):
            changes = self.validator.validate_update(data, files, multipart)
            self.images.validate(changes.images)

        product = self.store.get(product_id=product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        product_id = str(product.id)
        self.logger.info(f"Updating product {product_id} {sanitize_payload(changes.values, LOGGED_FIELDS)}")

        deadline.check("category resolution")
        with tracer.start_as_current_span("catalog.resolve_category"):
            values = self._resolve_changes(product, changes)

        current_urls = list(product.image_urls or [])
        batch = UploadBatch()
        try:
            if changes.images:
                with tracer.start_as_current_span("catalog.upload_images"):
                    self.images.ingest(product_id, changes.images, deadline=deadline, batch=batch)
            if changes.images or changes.image_urls is not None:
                kept_urls = changes.image_urls if changes.image_urls is not None else current_urls
                values["image_urls"] = kept_urls + batch.urls

            deadline.check("update")
            with tracer.start_as_current_span("catalog.update"):
                updated = self.store.update(product_id, values)
        except Exception as e:
            self.compensator.compensate(None, batch.paths, reason=f"{type(e).__name__}: {e}")
            if isinstance(e, UniqueConstraintViolation):
                raise ProductValidationError.for_field(e.field, f"'{e.value}' is already in use") from e
            raise

        dropped = [url for url in current_urls if url not in updated.image_urls]
        if dropped:
            self.images.remove(product_id, dropped)
        self.logger.info(f"Updated product {product_id}: {sorted(values)}")
        return updated

    def _resolve_changes(self, product: Product, changes: ProductChanges) -> dict:
        """Column values for the update: category resolved, slug re-allocated, SKU checked."""
        values = dict(changes.values)
        product_id = str(product.id)

        if changes.has_category_reference:
            gender = values.get("gender", product.gender)
            category_id = self.resolver.require(changes.category_id, changes.category_slug, gender)
            if self.store.get_category(category_id) is None:
                raise CategoryResolutionError(changes.category_id or changes.category_slug)
            values["category_id"] = category_id

        if values.get("subcategory_id"):
            self._check_subcategory(values["subcategory_id"])

        if "name" in values and values["name"] != product.name:
            values["slug"] = self.slugs.ensure_unique_slug(slugify(values["name"]), exclude_id=product_id)

        sku = values.get("sku")
        if sku and sku != product.sku and self.store.sku_exists(sku):
            raise ProductValidationError.for_field("sku", f"SKU '{sku}' is already in use")

        return values

    def _check_subcategory(self, subcategory_id: Optional[str]) -> Optional[str]:
        if not subcategory_id:
            return None
        if self.store.get_category(subcategory_id) is None:
            raise ProductValidationError.for_field("subcategory_id", f"Category '{subcategory_id}' does not exist")
        return subcategory_id
