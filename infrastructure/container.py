"""
Dependency Injection Container
================================

Simple service locator for the catalog's infrastructure and domain services.
Services depend on the abstract interfaces; the container decides which
implementation backs them.

Usage:
    from infrastructure.container import container

    # In your service
    storage = container.storage()
    store = container.catalog_store()
"""

import logging
from typing import Optional

from .storage import StorageFactory, StorageInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Singleton: every import shares the same container.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._storage: Optional[StorageInterface] = None
            self._catalog_store = None

            # Domain Services
            self._catalog_service = None
            self._ingestion_service = None

            self._initialized = True
            logger.info("Service container initialized")

    def storage(self) -> StorageInterface:
        """
        Get storage service instance (S3/MinIO, or in-memory).

        Returns:
            StorageInterface implementation (cached)
        """
        if self._storage is None:
            self._storage = StorageFactory.create()
            logger.debug(f"Created storage service: {type(self._storage).__name__}")

        return self._storage

    def catalog_store(self):
        """Get CatalogStoreInterface implementation (Django ORM)."""
        if self._catalog_store is None:
            from catalog.infra.store import DjangoCatalogStore

            self._catalog_store = DjangoCatalogStore()
            logger.debug("Created DjangoCatalogStore")
        return self._catalog_store

    def catalog_service(self):
        """Get CatalogService instance."""
        if self._catalog_service is None:
            from catalog.domain.services import CatalogService

            self._catalog_service = CatalogService(store=self.catalog_store(), storage=self.storage())
            logger.debug("Created CatalogService")
        return self._catalog_service

    def ingestion_service(self):
        """Get ProductIngestionService instance."""
        if self._ingestion_service is None:
            from catalog.domain.services import ProductIngestionService

            # Ingestion shares the store and storage with the read side
            self._ingestion_service = ProductIngestionService(store=self.catalog_store(), storage=self.storage())
            logger.debug("Created ProductIngestionService")
        return self._ingestion_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._storage = None
        self._catalog_store = None
        self._catalog_service = None
        self._ingestion_service = None
        logger.info("Service container reset")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_storage() -> StorageInterface:
    """Get storage service from global container."""
    return container.storage()
