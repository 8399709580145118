"""
Catalog Store Interface
=======================

Abstract base class for the catalog's persistence operations. The ingestion
pipeline and the read path receive an implementation through the service
container instead of touching the ORM directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from catalog.domain.models import Category, Product


SORT_NEWEST = "newest"
SORT_PRICE_ASC = "price_asc"
SORT_PRICE_DESC = "price_desc"
SORT_OPTIONS = (SORT_NEWEST, SORT_PRICE_ASC, SORT_PRICE_DESC)

STATUS_ALL = "all"


@dataclass
class ProductQuery:
    """
    Filters for a product listing.

    Attributes:
        gender: Restrict to one gender
        category_id: Restrict to one resolved category
        search: Case-insensitive substring over name and description
        sort: One of SORT_OPTIONS
        limit: Page size
        offset: Rows to skip
        status: Product status, or STATUS_ALL for no status filter
        is_featured: Only featured products when True
        is_on_sale: Only on-sale products when True
    """

    gender: Optional[str] = None
    category_id: Optional[str] = None
    search: Optional[str] = None
    sort: str = SORT_NEWEST
    limit: int = 24
    offset: int = 0
    status: str = "active"
    is_featured: bool = False
    is_on_sale: bool = False


class CatalogStoreInterface(ABC):
    """
    Abstract interface for catalog persistence.

    Implementations:
        - DjangoCatalogStore: Django ORM
    """

    @abstractmethod
    def insert(self, values: Dict[str, Any]) -> Product:
        """
        Insert a product row.

        Args:
            values: Column values (``category_id``/``subcategory_id`` as ids)

        Returns:
            The stored Product with its generated id

        Raises:
            UniqueConstraintViolation: slug or sku already taken
            StoreError: any other store failure
        """

    @abstractmethod
    def update(self, product_id: str, values: Dict[str, Any]) -> Product:
        """
        Update columns of an existing product.

        Raises:
            UniqueConstraintViolation: the new slug or sku is already taken
            StoreError: row missing or store failure
        """

    @abstractmethod
    def delete(self, product_id: str) -> bool:
        """
        Delete a product row.

        Returns:
            True if a row was deleted, False if none existed

        Raises:
            StoreError: store failure
        """

    @abstractmethod
    def get_many(self, product_ids: Sequence[str]) -> List[Product]:
        """Fetch the products among ``product_ids`` that exist; malformed ids match nothing."""

    @abstractmethod
    def delete_many(self, product_ids: Sequence[str]) -> int:
        """
        Delete several product rows in one transaction.

        Returns:
            Number of rows deleted

        Raises:
            StoreError: store failure (nothing is deleted)
        """

    @abstractmethod
    def update_many(self, product_ids: Sequence[str], values: Dict[str, Any]) -> List[str]:
        """
        Set the same column values on several products in one transaction.

        Returns:
            Ids of the products that were updated

        Raises:
            StoreError: store failure (nothing is updated)
        """

    @abstractmethod
    def query(self, criteria: ProductQuery) -> Tuple[List[Product], int]:
        """
        Run a filtered, sorted, paginated listing.

        Returns:
            (page of products, total matching count)
        """

    @abstractmethod
    def get(self, product_id: Optional[str] = None, slug: Optional[str] = None) -> Optional[Product]:
        """Fetch one product by id or slug, or None."""

    @abstractmethod
    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Check whether a product other than ``exclude_id`` already uses ``slug``."""

    @abstractmethod
    def sku_exists(self, sku: str) -> bool:
        """Check whether a product already uses ``sku``."""

    @abstractmethod
    def generate_unique_sku(self, prefix: str, base_sku: Optional[str] = None) -> str:
        """
        Store-side unique SKU generator.

        Args:
            prefix: Three-letter uppercase prefix
            base_sku: Caller-suggested SKU to disambiguate from

        Raises:
            StoreError: generator unavailable or exhausted
        """

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Fetch a category by id, or None."""

    @abstractmethod
    def find_category(self, slug: str, gender: Optional[str] = None) -> Optional[Category]:
        """
        Look up a category by slug.

        With ``gender`` the lookup is restricted to that gender; without it
        any category carrying the slug matches.
        """

    @abstractmethod
    def list_categories(self, gender: Optional[str] = None) -> List[Category]:
        """List categories ordered by name, optionally for one gender."""
