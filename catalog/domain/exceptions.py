from typing import Dict, List, Optional, Sequence


class CatalogError(Exception):
    """Base class for catalog pipeline exceptions."""

    code = "internal_error"


class ProductValidationError(CatalogError):
    """Raised when a product submission is malformed.

    ``details`` lists every offending field, not just the first one found.
    """

    code = "validation_error"

    def __init__(self, details: List[Dict[str, str]], message: str = "Validation error"):
        super().__init__(message)
        self.details = details

    @classmethod
    def for_field(cls, field: str, message: str) -> "ProductValidationError":
        return cls([{"field": field, "message": message}])


class CategoryResolutionError(ProductValidationError):
    """Raised when a create or update references a category that does not exist."""

    def __init__(self, reference: str):
        super().__init__(
            [{"field": "category_id", "message": f"Category '{reference}' could not be resolved"}],
        )
        self.reference = reference


class ProductNotFoundError(CatalogError):
    """Raised when an update targets a product that does not exist."""

    code = "product_not_found"

    def __init__(self, product_id: str):
        super().__init__("Product not found")
        self.product_id = product_id


class UploadError(CatalogError):
    """Raised when an image violates the upload limits or its upload fails.

    ``uploaded_paths`` holds the storage keys written before the failure so
    they can be removed.
    """

    code = "upload_error"

    def __init__(self, message: str, uploaded_paths: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.uploaded_paths = list(uploaded_paths or [])


class StoreError(CatalogError):
    """Raised when the catalog store fails (connectivity, constraints, missing rows)."""

    code = "store_error"


class UniqueConstraintViolation(StoreError):
    """Raised by the store when a write collides on a unique column."""

    def __init__(self, field: str, value: str):
        super().__init__(f"Duplicate value for {field}: {value}")
        self.field = field
        self.value = value


class SlugAllocationError(StoreError):
    """Raised when no free slug is found within the configured suffix bound."""


class IngestionDeadlineExceeded(StoreError):
    """Raised when a create request runs past its deadline."""

    code = "deadline_exceeded"


class CompensationError(CatalogError):
    """Cleanup after a failed write did not complete. Logged, never raised to callers."""

    code = "compensation_error"
