"""
Storage Factory
===============

Factory for creating the configured object storage backend.
"""

import logging
from typing import Optional

from django.conf import settings

from .interface import StorageInterface
from .memory_adapter import InMemoryStorageAdapter
from .s3_adapter import S3StorageAdapter

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for creating storage backends.

    Usage:
        storage = StorageFactory.create()           # from settings
        storage = StorageFactory.create("memory")   # explicit
    """

    @staticmethod
    def create(backend: Optional[str] = None) -> StorageInterface:
        """
        Create a storage backend instance.

        Args:
            backend: 's3' or 'memory'. If None, uses
                     settings.INFRASTRUCTURE["STORAGE_BACKEND"] (default 's3').

        Returns:
            StorageInterface implementation
        """
        if backend is None:
            backend = getattr(settings, "INFRASTRUCTURE", {}).get("STORAGE_BACKEND", "s3")

        if backend == "memory":
            logger.info("Creating in-memory storage backend")
            return StorageFactory.create_memory()
        if backend == "s3":
            logger.info("Creating S3/MinIO storage backend")
            return StorageFactory.create_s3()

        raise ValueError(f"Unknown storage backend: {backend}")

    @staticmethod
    def create_s3() -> S3StorageAdapter:
        """Create S3/MinIO storage backend explicitly."""
        return S3StorageAdapter()

    @staticmethod
    def create_memory() -> InMemoryStorageAdapter:
        """Create in-memory storage backend explicitly."""
        return InMemoryStorageAdapter(bucket=getattr(settings, "AWS_STORAGE_BUCKET_NAME", "product-images"))
