"""
CatalogService - Product listing, lookup, delete & bulk changes

Read side of the catalog plus product deletion and bulk changes. Listing
filters resolve a category slug the same way the create pipeline does
(gender-scoped first); an unresolvable slug yields an empty listing rather
than an error.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from catalog.conf import catalog_setting
from catalog.domain.exceptions import StoreError
from catalog.domain.models import Category, ProductStatus
from catalog.infra.store import ProductQuery
from catalog.infra.store.interface import SORT_NEWEST
from infrastructure.container import container

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from .category_resolver import CategoryResolver, looks_like_uuid
from .image_ingestor import ImageIngestor

logger = logging.getLogger(__name__)

BULK_UPDATE_FIELDS = ("status", "is_featured", "is_on_sale")


class CatalogService(BaseService):
    """
    Service for catalog reads, product deletion and bulk changes.

    Responsibilities:
    - List products with filtering, sorting and pagination
    - Get product details by id or slug
    - Delete products and, best-effort, their stored images
    - Bulk delete and bulk update (status, flags, category) of many products
    - List categories

    Callers without admin access only ever see active products.
    """

    def __init__(self, store=None, storage=None):
        """
        Initialize CatalogService.

        Args:
            store: Catalog store (injected via DI container)
            storage: Object storage for images (injected via DI container)
        """
        super().__init__()
        self.store = store or container.catalog_store()
        self.storage = storage or container.storage()
        self.resolver = CategoryResolver(self.store)
        self.images = ImageIngestor(self.storage)

    @BaseService.log_performance
    def list_products(
        self, filters: Optional[Dict[str, Any]] = None, include_unpublished: bool = False
    ) -> ServiceResult[Dict[str, Any]]:
        """
        List products.

        Args:
            filters: Validated listing parameters (gender, category_id,
                category_slug, search, sort, limit, offset, status,
                is_featured, is_on_sale)
            include_unpublished: Honour ``status``; otherwise only active
                products are listed

        Returns:
            ServiceResult with {"results": [Product, ...], "count": int}

        Example:
            >>> result = catalog_service.list_products({"gender": "mens", "category_slug": "t-shirts"})
            >>> if result.ok:
            ...     products = result.value["results"]
        """
        filters = filters or {}
        gender = filters.get("gender") or None

        category_id = filters.get("category_id") or None
        category_slug = filters.get("category_slug") or None
        # category_id carries either a real id or a slug-like reference
        if category_id and not looks_like_uuid(category_id):
            category_slug = category_slug or category_id
            category_id = None

        try:
            if category_id or category_slug:
                category_id = self.resolver.resolve(category_id=category_id, slug=category_slug, gender=gender)
                if category_id is None:
                    self.logger.info(f"Category '{category_slug}' not found; empty listing")
                    return service_ok({"results": [], "count": 0})

            status = filters.get("status") or ProductStatus.ACTIVE
            if not include_unpublished:
                status = ProductStatus.ACTIVE

            criteria = ProductQuery(
                gender=gender,
                category_id=category_id,
                search=filters.get("search") or None,
                sort=filters.get("sort") or SORT_NEWEST,
                limit=min(
                    filters.get("limit") or catalog_setting("DEFAULT_PAGE_SIZE"), catalog_setting("MAX_PAGE_SIZE")
                ),
                offset=filters.get("offset") or 0,
                status=status,
                is_featured=bool(filters.get("is_featured")),
                is_on_sale=bool(filters.get("is_on_sale")),
            )
            products, count = self.store.query(criteria)

            self.logger.info(f"Listed products: {len(products)} of {count} (status={criteria.status})")
            return service_ok({"results": products, "count": count})

        except StoreError as e:
            self.logger.error(f"Error listing products: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))

    @BaseService.log_performance
    def get_product(self, id_or_slug: str, include_unpublished: bool = False) -> ServiceResult[Dict[str, Any]]:
        """
        Get product details by id or slug.

        Returns:
            ServiceResult with {"product": Product, "category": Category | None}
        """
        try:
            if looks_like_uuid(id_or_slug):
                product = self.store.get(product_id=id_or_slug)
            else:
                product = self.store.get(slug=id_or_slug)

            if product is None or (not include_unpublished and product.status != ProductStatus.ACTIVE):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")

            category = self.store.get_category(str(product.category_id)) if product.category_id else None
            self.logger.info(f"Retrieved product: {product.name} (id={product.id})")
            return service_ok({"product": product, "category": category})

        except StoreError as e:
            self.logger.error(f"Error getting product {id_or_slug}: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))

    @BaseService.log_performance
    def delete_product(self, product_id: str) -> ServiceResult[None]:
        """
        Delete a product, then remove its stored images.

        Image removal is best-effort: objects that cannot be removed are
        logged and the delete still succeeds.
        """
        try:
            product = self.store.get(product_id=product_id)
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")

            image_urls = list(product.image_urls or [])
            if not self.store.delete(product_id):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")

        except StoreError as e:
            self.logger.error(f"Error deleting product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))

        self.images.remove(product_id, image_urls)
        self.logger.info(f"Deleted product {product_id}")
        return service_ok(None)

    @BaseService.log_performance
    def bulk_delete(self, product_ids: Sequence[str]) -> ServiceResult[int]:
        """
        Delete several products at once, then remove their stored images.

        Ids that match no product are ignored; when none match the result is
        ``product_not_found``. Image removal is best-effort, as in
        delete_product().

        Returns:
            ServiceResult with the number of products deleted
        """
        try:
            products = self.store.get_many(product_ids)
            if not products:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "No products found to delete")
            deleted = self.store.delete_many([str(product.id) for product in products])
        except StoreError as e:
            self.logger.error(f"Error bulk deleting {len(product_ids)} products: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))

        for product in products:
            self.images.remove(str(product.id), list(product.image_urls or []))
        self.logger.info(f"Bulk deleted {deleted} of {len(product_ids)} requested products")
        return service_ok(deleted)

    @BaseService.log_performance
    def bulk_update(self, product_ids: Sequence[str], updates: Dict[str, Any]) -> ServiceResult[List[str]]:
        """
        Set status, flags or category on several products at once.

        Args:
            product_ids: Products to change; unknown ids are ignored
            updates: Any of ``status``, ``is_featured``, ``is_on_sale`` and
                ``category_id`` (a category id or slug)

        Returns:
            ServiceResult with the ids of the products updated
        """
        values = {name: updates[name] for name in BULK_UPDATE_FIELDS if name in updates}

        try:
            reference = updates.get("category_id")
            if reference:
                category_id = self._existing_category(reference)
                if category_id is None:
                    message = f"Category '{reference}' could not be resolved"
                    problem = {"field": "updates.category_id", "message": message}
                    return service_err(ErrorCodes.VALIDATION_ERROR, "Validation error", [problem])
                values["category_id"] = category_id

            if not values:
                problem = {"field": "updates", "message": "No fields to update"}
                return service_err(ErrorCodes.VALIDATION_ERROR, "Validation error", [problem])

            updated = self.store.update_many(product_ids, values)
        except StoreError as e:
            self.logger.error(f"Error bulk updating {len(product_ids)} products: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))

        self.logger.info(f"Bulk updated {len(updated)} of {len(product_ids)} requested products")
        return service_ok(updated)

    def _existing_category(self, reference: str) -> Optional[str]:
        # Not gender-scoped: a slug matches the global category first
        if looks_like_uuid(reference):
            category_id = self.resolver.resolve(category_id=reference)
        else:
            category_id = self.resolver.resolve(slug=reference)
        if category_id is None or self.store.get_category(category_id) is None:
            return None
        return category_id

    @BaseService.log_performance
    def list_categories(self, gender: Optional[str] = None) -> ServiceResult[List[Category]]:
        try:
            return service_ok(self.store.list_categories(gender or None))
        except StoreError as e:
            self.logger.error(f"Error listing categories: {e}", exc_info=True)
            return service_err(ErrorCodes.STORE_ERROR, str(e))
