"""
Product image ingestion.

Uploads a product's image files to object storage under
``products/<product_id>/`` and returns their public URLs in receipt order.
Also removes them again, best-effort, once a product drops or deletes them.
"""

import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from catalog.conf import catalog_setting
from catalog.domain.exceptions import UploadError
from catalog.infra.observability.metrics import image_cleanup_failures_total, images_uploaded_total
from infrastructure.storage import StorageException

logger = logging.getLogger(__name__)

mimetypes.add_type("image/webp", ".webp")


@dataclass
class UploadBatch:
    """URLs and storage keys of the images uploaded so far, index-aligned."""

    urls: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)

    def add(self, url: str, path: str) -> None:
        self.urls.append(url)
        self.paths.append(path)


def guess_content_type(file: Any) -> Optional[str]:
    declared = getattr(file, "content_type", None)
    if declared:
        return declared.split(";")[0].strip().lower()
    guessed, _ = mimetypes.guess_type(getattr(file, "name", "") or "")
    return guessed


def file_size(file: Any) -> int:
    size = getattr(file, "size", None)
    if size is not None:
        return size
    position = file.tell()
    file.seek(0, os.SEEK_END)
    size = file.tell()
    file.seek(position)
    return size


def extension_for(file: Any, content_type: Optional[str]) -> str:
    _, ext = os.path.splitext(getattr(file, "name", "") or "")
    if ext:
        return ext.lstrip(".").lower()
    guessed = mimetypes.guess_extension(content_type or "") or ".bin"
    return guessed.lstrip(".")


class ImageIngestor:
    def __init__(self, storage, max_images: Optional[int] = None, max_bytes: Optional[int] = None):
        self.storage = storage
        self.max_images = max_images or catalog_setting("MAX_IMAGES")
        self.max_bytes = max_bytes or catalog_setting("MAX_IMAGE_BYTES")
        self.allowed_types = tuple(catalog_setting("ALLOWED_IMAGE_TYPES"))
        self.key_prefix = catalog_setting("IMAGE_KEY_PREFIX").strip("/")

    def validate(self, files: Sequence[Any]) -> None:
        """
        Check the upload limits without touching storage.

        Raises:
            UploadError: too many files, a file too large, or a type not allowed
        """
        if len(files) > self.max_images:
            raise UploadError(f"Too many images: {len(files)} (max {self.max_images})")

        for file in files:
            name = getattr(file, "name", "") or "<unnamed>"
            content_type = guess_content_type(file)
            if content_type not in self.allowed_types:
                raise UploadError(f"Image '{name}' has unsupported type {content_type or 'unknown'}")
            if file_size(file) > self.max_bytes:
                raise UploadError(f"Image '{name}' exceeds {self.max_bytes} bytes")

    def key_for(self, product_id: str, file: Any, content_type: Optional[str]) -> str:
        return f"{self.key_prefix}/{product_id}/{uuid.uuid4().hex}.{extension_for(file, content_type)}"

    def ingest(
        self,
        product_id: str,
        files: Sequence[Any],
        deadline=None,
        batch: Optional[UploadBatch] = None,
    ) -> UploadBatch:
        """
        Upload ``files`` one at a time, in order.

        Args:
            product_id: Owner of the images; part of every key
            files: Uploaded files, in receipt order
            deadline: Checked before each upload
            batch: Filled in place as uploads succeed, so a caller holding it
                knows what was written even when this raises

        Raises:
            UploadError: a file failed validation or its upload failed;
                ``uploaded_paths`` lists the keys written before it
            IngestionDeadlineExceeded: the deadline passed between uploads
        """
        batch = batch if batch is not None else UploadBatch()
        self.validate(files)

        for index, file in enumerate(files):
            if deadline is not None:
                deadline.check(f"image upload {index + 1} of {len(files)}")

            content_type = guess_content_type(file)
            path = self.key_for(product_id, file, content_type)
            try:
                if hasattr(file, "seek"):
                    file.seek(0)
                stored = self.storage.upload(file, path, content_type, make_public=True)
            except StorageException as e:
                logger.error(
                    f"Image upload {index + 1}/{len(files)} for product {product_id} failed: {e}",
                    exc_info=True,
                )
                raise UploadError(f"Failed to upload image: {e}", uploaded_paths=batch.paths) from e

            batch.add(stored.url, stored.key)
            images_uploaded_total.inc()

        if files:
            logger.info(f"Uploaded {len(files)} image(s) for product {product_id}")
        return batch

    def storage_path_from_url(self, url: str, product_id: str) -> Optional[str]:
        """Storage key for a public image URL of ``product_id``, or None if it is not one of ours."""
        marker = f"{self.key_prefix}/{product_id}/"
        path = unquote(urlparse(url or "").path)
        index = path.find(marker)
        if index == -1:
            return None
        return path[index:]

    def remove(self, product_id: str, urls: Sequence[str]) -> List[str]:
        """
        Best-effort removal of the stored objects behind ``urls``.

        Externally hosted URLs are skipped. Objects that cannot be removed are
        logged and counted, never raised.

        Returns:
            Storage keys that could not be removed
        """
        failed = []
        for url in urls:
            path = self.storage_path_from_url(url, product_id)
            if path is None:
                continue
            try:
                self.storage.delete(path)
            except StorageException as e:
                failed.append(path)
                image_cleanup_failures_total.inc()
                logger.warning(f"Could not remove image {path} of product {product_id}: {e}")
        return failed
