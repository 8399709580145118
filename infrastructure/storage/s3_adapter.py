"""
S3 Storage Adapter
==================

StorageInterface on AWS S3 or MinIO through django-storages.

Every backend error (botocore client errors, connection failures, timeouts)
leaves this module as StorageException. Nothing is reported as "missing"
unless S3 actually said so.
"""

import logging
from contextlib import contextmanager
from typing import BinaryIO

from django.conf import settings
from storages.backends.s3boto3 import S3Boto3Storage

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


@contextmanager
def s3_errors(operation: str, key: str):
    """Translate anything raised by boto3 / django-storages into StorageException."""
    try:
        yield
    except StorageException:
        raise
    except Exception as e:
        logger.error(f"S3 {operation} failed for {key}: {e}")
        raise StorageException(f"S3 {operation} failed for {key}: {e}") from e


class S3StorageAdapter(StorageInterface):
    """
    Product image storage on S3 / MinIO.

    Keys are written as given (``AWS_S3_FILE_OVERWRITE`` is off, so
    django-storages may append a suffix on collision; the returned
    StorageFile carries the key actually written). Public URLs come from
    ``AWS_S3_CUSTOM_DOMAIN`` or the endpoint, with ``AWS_DEFAULT_ACL``
    applied on write.
    """

    def __init__(self):
        self.storage = S3Boto3Storage()
        self._bucket_name = getattr(settings, "AWS_STORAGE_BUCKET_NAME", "product-images")

    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
        make_public: bool = True,
    ) -> StorageFile:
        # ContentType comes from the file's content_type, else the key's extension
        with s3_errors("upload", path):
            key = self.storage.save(path, file)
            stored = StorageFile(
                key=key,
                url=self.storage.url(key),
                size=self.storage.size(key),
                content_type=content_type,
                bucket=self._bucket_name,
            )

        logger.info(f"Uploaded {stored.size} bytes to s3://{self._bucket_name}/{key}")
        return stored

    def delete(self, key: str) -> bool:
        """
        Delete ``key``.

        S3 deletes are idempotent; a missing key is not an error.
        """
        with s3_errors("delete", key):
            self.storage.delete(key)

        logger.info(f"Deleted s3://{self._bucket_name}/{key}")
        return True

    def exists(self, key: str) -> bool:
        with s3_errors("existence check", key):
            return self.storage.exists(key)

    @property
    def bucket_name(self) -> str:
        return self._bucket_name
