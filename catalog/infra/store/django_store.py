"""
Django Catalog Store
====================

CatalogStoreInterface implementation on the Django ORM.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from catalog.conf import catalog_setting
from catalog.domain.exceptions import StoreError, UniqueConstraintViolation
from catalog.domain.models import Category, Product

from .interface import SORT_PRICE_ASC, SORT_PRICE_DESC, STATUS_ALL, CatalogStoreInterface, ProductQuery

logger = logging.getLogger(__name__)

UNIQUE_PRODUCT_FIELDS = ("slug", "sku")


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _as_uuids(values: Sequence[Any]) -> List[uuid.UUID]:
    return [parsed for parsed in map(_as_uuid, values) if parsed is not None]


class DjangoCatalogStore(CatalogStoreInterface):
    """
    Catalog persistence backed by the default Django database.

    Every write runs in its own atomic block so a failed insert never poisons
    an enclosing transaction; uniqueness of ``slug`` and ``sku`` is enforced
    by the table's unique indexes.
    """

    def insert(self, values: Dict[str, Any]) -> Product:
        try:
            with transaction.atomic():
                product = Product.objects.create(**values)
        except IntegrityError as e:
            raise self._classify_integrity_error(e, values) from e
        except DatabaseError as e:
            logger.error(f"Failed to insert product '{values.get('name')}': {e}")
            raise StoreError(f"Failed to create product: {e}") from e

        logger.info(f"Inserted product {product.id} (slug={product.slug}, sku={product.sku})")
        return product

    def update(self, product_id: str, values: Dict[str, Any]) -> Product:
        try:
            with transaction.atomic():
                product = Product.objects.select_for_update().get(id=product_id)
                for field, value in values.items():
                    setattr(product, field, value)
                product.save(update_fields=[*values.keys(), "updated_at"])
        except Product.DoesNotExist as e:
            raise StoreError(f"Product {product_id} not found") from e
        except IntegrityError as e:
            raise self._classify_integrity_error(e, values, exclude_id=product_id) from e
        except DatabaseError as e:
            logger.error(f"Failed to update product {product_id}: {e}")
            raise StoreError(f"Failed to update product: {e}") from e

        return product

    def delete(self, product_id: str) -> bool:
        try:
            deleted, _ = Product.objects.filter(id=product_id).delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete product {product_id}: {e}")
            raise StoreError(f"Failed to delete product: {e}") from e

        return deleted > 0

    def get_many(self, product_ids: Sequence[str]) -> List[Product]:
        ids = _as_uuids(product_ids)
        if not ids:
            return []
        try:
            return list(Product.objects.filter(id__in=ids))
        except DatabaseError as e:
            raise StoreError(f"Failed to fetch products: {e}") from e

    def delete_many(self, product_ids: Sequence[str]) -> int:
        ids = _as_uuids(product_ids)
        if not ids:
            return 0
        try:
            with transaction.atomic():
                deleted, _ = Product.objects.filter(id__in=ids).delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete {len(ids)} products: {e}")
            raise StoreError(f"Failed to delete products: {e}") from e

        logger.info(f"Deleted {deleted} of {len(ids)} requested products")
        return deleted

    def update_many(self, product_ids: Sequence[str], values: Dict[str, Any]) -> List[str]:
        ids = _as_uuids(product_ids)
        if not ids:
            return []
        try:
            with transaction.atomic():
                queryset = Product.objects.select_for_update().filter(id__in=ids)
                updated = [str(pk) for pk in queryset.values_list("id", flat=True)]
                # queryset.update() skips auto_now
                Product.objects.filter(id__in=updated).update(**values, updated_at=timezone.now())
        except IntegrityError as e:
            logger.error(f"Bulk update of {len(ids)} products violated a constraint: {e}")
            raise StoreError(f"Failed to update products: {e}") from e
        except DatabaseError as e:
            logger.error(f"Failed to update {len(ids)} products: {e}")
            raise StoreError(f"Failed to update products: {e}") from e

        logger.info(f"Updated {len(updated)} products: {sorted(values)}")
        return updated

    def query(self, criteria: ProductQuery) -> Tuple[List[Product], int]:
        category_id = None
        if criteria.category_id:
            category_id = _as_uuid(criteria.category_id)
            if category_id is None:
                return [], 0

        try:
            queryset = Product.objects.all()
            if category_id:
                queryset = queryset.filter(category_id=category_id)
            if criteria.gender:
                queryset = queryset.filter(gender=criteria.gender)
            if criteria.status != STATUS_ALL:
                queryset = queryset.filter(status=criteria.status)
            if criteria.is_featured:
                queryset = queryset.filter(is_featured=True)
            if criteria.is_on_sale:
                queryset = queryset.filter(is_on_sale=True)
            if criteria.search:
                queryset = queryset.filter(Q(name__icontains=criteria.search) | Q(description__icontains=criteria.search))

            if criteria.sort == SORT_PRICE_ASC:
                queryset = queryset.order_by("price", "-created_at")
            elif criteria.sort == SORT_PRICE_DESC:
                queryset = queryset.order_by("-price", "-created_at")
            else:
                queryset = queryset.order_by("-created_at")

            count = queryset.count()
            products = list(queryset[criteria.offset : criteria.offset + criteria.limit])
        except (DatabaseError, ValidationError) as e:
            logger.error(f"Failed to query products: {e}")
            raise StoreError(f"Failed to fetch products: {e}") from e

        return products, count

    def get(self, product_id: Optional[str] = None, slug: Optional[str] = None) -> Optional[Product]:
        try:
            if product_id is not None:
                parsed = _as_uuid(product_id)
                if parsed is None:
                    return None
                return Product.objects.select_related("category").filter(id=parsed).first()
            if slug is not None:
                return Product.objects.select_related("category").filter(slug=slug).first()
        except DatabaseError as e:
            raise StoreError(f"Failed to fetch product: {e}") from e
        return None

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        try:
            queryset = Product.objects.filter(slug=slug)
            if exclude_id is not None:
                queryset = queryset.exclude(id=_as_uuid(exclude_id))
            return queryset.exists()
        except DatabaseError as e:
            raise StoreError(f"Failed to check slug '{slug}': {e}") from e

    def sku_exists(self, sku: str) -> bool:
        try:
            return Product.objects.filter(sku=sku).exists()
        except DatabaseError as e:
            raise StoreError(f"Failed to check SKU '{sku}': {e}") from e

    def generate_unique_sku(self, prefix: str, base_sku: Optional[str] = None) -> str:
        """
        Generate a SKU that no product uses yet.

        With ``base_sku`` candidates are ``BASE-1``, ``BASE-2``, ...; without
        it they are ``PREFIX-000001``, ``PREFIX-000002``, ... starting after the
        number of SKUs already carrying the prefix.
        """
        limit = catalog_setting("MAX_SKU_CANDIDATES")
        try:
            if base_sku:
                candidates = (f"{base_sku}-{n}" for n in range(1, limit + 1))
            else:
                start = Product.objects.filter(sku__startswith=f"{prefix}-").count() + 1
                candidates = (f"{prefix}-{n:06d}" for n in range(start, start + limit))

            for candidate in candidates:
                if not Product.objects.filter(sku=candidate).exists():
                    return candidate
        except DatabaseError as e:
            raise StoreError(f"SKU generator failed: {e}") from e

        raise StoreError(f"SKU generator exhausted {limit} candidates for prefix {prefix}")

    def get_category(self, category_id: str) -> Optional[Category]:
        parsed = _as_uuid(category_id)
        if parsed is None:
            return None
        try:
            return Category.objects.filter(id=parsed).first()
        except DatabaseError as e:
            raise StoreError(f"Failed to fetch category: {e}") from e

    def find_category(self, slug: str, gender: Optional[str] = None) -> Optional[Category]:
        queryset = Category.objects.filter(slug=slug)
        if gender:
            queryset = queryset.filter(gender=gender)
        try:
            # Global categories win a slug-only lookup
            return queryset.order_by(F("gender").asc(nulls_first=True), "created_at").first()
        except DatabaseError as e:
            raise StoreError(f"Failed to look up category '{slug}': {e}") from e

    def list_categories(self, gender: Optional[str] = None) -> List[Category]:
        queryset = Category.objects.order_by("name")
        if gender:
            queryset = queryset.filter(gender=gender)
        try:
            return list(queryset)
        except DatabaseError as e:
            raise StoreError(f"Failed to fetch categories: {e}") from e

    def _classify_integrity_error(
        self, error: IntegrityError, values: Dict[str, Any], exclude_id: Optional[str] = None
    ) -> StoreError:
        message = str(error).lower()
        for field in UNIQUE_PRODUCT_FIELDS:
            if f".{field}" in message or f"_{field}_" in message or f"({field})" in message:
                return UniqueConstraintViolation(field, values.get(field, ""))

        # Backends that do not name the column: ask the table.
        for field in UNIQUE_PRODUCT_FIELDS:
            value = values.get(field)
            if not value:
                continue
            others = Product.objects.filter(**{field: value})
            if exclude_id is not None:
                others = others.exclude(id=_as_uuid(exclude_id))
            if others.exists():
                return UniqueConstraintViolation(field, value)

        logger.error(f"Integrity error writing product '{values.get('name', exclude_id)}': {error}")
        return StoreError(f"Failed to write product: {error}")
