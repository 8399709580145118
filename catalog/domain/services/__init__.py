"""
Catalog Service Layer

Business logic for product ingestion and catalog reads.

Services:
- ProductIngestionService: Product create pipeline (validate, resolve,
  allocate, insert, upload, attach, roll back on failure) and partial updates
- CatalogService: Product listing, lookup, delete, bulk delete / update;
  category listing

Usage:
    from catalog.domain.services import ProductIngestionService

    service = ProductIngestionService()
    result = service.create_product(request.data, request.FILES.getlist("images"), multipart=True)

    if result.ok:
        created = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from .catalog_service import CatalogService
from .ingestion_service import CreatedProduct, ProductIngestionService

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    "service_ok",
    "service_err",
    "ErrorCodes",
    # Services
    "CatalogService",
    "ProductIngestionService",
    "CreatedProduct",
]
