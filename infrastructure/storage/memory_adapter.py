"""
In-Memory Storage Adapter
=========================

Process-local StorageInterface implementation. Used by the test settings and
for running the service without an object store.
"""

import logging
import threading
from typing import BinaryIO, Dict, List, Optional, Tuple

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class InMemoryStorageAdapter(StorageInterface):
    """
    Stores objects in a dict keyed by path.

    Public URLs are ``<base_url>/<bucket>/<key>``.
    """

    def __init__(self, bucket: str = "product-images", base_url: str = "http://storage.local"):
        self._bucket_name = bucket
        self.base_url = base_url.rstrip("/")
        self._objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
        make_public: bool = True,
    ) -> StorageFile:
        try:
            if hasattr(file, "seek"):
                file.seek(0)
            content = file.read()
        except Exception as e:
            raise StorageException(f"Could not read upload for {path}: {e}") from e

        with self._lock:
            if path in self._objects:
                raise StorageException(f"Object already exists: {path}")
            self._objects[path] = (content, content_type)

        logger.debug(f"Stored {len(content)} bytes at {path}")
        return StorageFile(
            key=path,
            url=self.url_for(path),
            size=len(content),
            content_type=content_type,
            bucket=self._bucket_name,
        )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._objects.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return key in self._objects

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{self._bucket_name}/{key}"

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """List stored keys, optionally under ``prefix``."""
        with self._lock:
            return sorted(key for key in self._objects if prefix is None or key.startswith(prefix))

    def read(self, key: str) -> bytes:
        try:
            return self._objects[key][0]
        except KeyError as e:
            raise StorageException(f"Object not found: {key}") from e

    @property
    def bucket_name(self) -> str:
        return self._bucket_name
