"""
Catalog Store
=============

Persistence abstraction for products and categories.
"""

from .django_store import DjangoCatalogStore
from .interface import CatalogStoreInterface, ProductQuery


__all__ = [
    "CatalogStoreInterface",
    "DjangoCatalogStore",
    "ProductQuery",
]
