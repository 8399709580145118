"""
Storage Interface
=================

Abstract base class defining the contract for object storage operations used
by the catalog (product images).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class StorageFile:
    """
    Represents a stored file with its metadata.

    Attributes:
        key: Unique identifier/path for the file
        url: Public URL to access the file
        size: File size in bytes
        content_type: MIME type of the file
        bucket: Storage bucket/container name (optional)
    """

    key: str
    url: str
    size: int
    content_type: str
    bucket: Optional[str] = None


class StorageInterface(ABC):
    """
    Abstract interface for object storage operations.

    Concrete implementations:
        - S3StorageAdapter: AWS S3 / MinIO storage
        - InMemoryStorageAdapter: process-local storage for tests and local runs
    """

    @abstractmethod
    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
        make_public: bool = True,
    ) -> StorageFile:
        """
        Upload a file to storage.

        Args:
            file: Binary file object to upload
            path: Destination path/key in storage
            content_type: MIME type of the file
            make_public: Whether to make the file publicly accessible

        Returns:
            StorageFile object with metadata

        Raises:
            StorageException: If upload fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a file from storage. Deleting a key that is already gone is
        not an error.

        Args:
            key: File identifier/path to delete

        Returns:
            True once the key is gone. Backends that can tell return False
            when there was nothing to delete.

        Raises:
            StorageException: If the backend could not be reached or refused
                the delete; callers must never read this as "already gone"
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check if a file exists in storage.

        Args:
            key: File identifier/path to check

        Returns:
            True if file exists, False otherwise

        Raises:
            StorageException: If the backend could not be reached
        """
        pass

    @property
    @abstractmethod
    def bucket_name(self) -> str:
        """
        Get the storage bucket/container name.

        Returns:
            Bucket name string
        """
        pass


class StorageException(Exception):
    """Base exception for storage operations."""

    pass
