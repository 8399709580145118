"""
Storage Abstraction Layer
==========================

Provides a unified interface for object storage operations (MinIO/S3).
"""

from .factory import StorageFactory
from .interface import StorageException, StorageFile, StorageInterface
from .memory_adapter import InMemoryStorageAdapter
from .s3_adapter import S3StorageAdapter

__all__ = [
    "StorageInterface",
    "StorageFile",
    "StorageException",
    "S3StorageAdapter",
    "InMemoryStorageAdapter",
    "StorageFactory",
]
