"""
Base classes and utilities for the catalog service layer.

Services return a ServiceResult for every outcome the caller is expected to
map to a response (validation failures, missing rows, store errors) and keep
exceptions for the internal steps of an operation.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)
        details: Field-level problems for validation failures

    Examples:
        >>> result = service_ok(created)
        >>> if result.ok:
        ...     return Response({"success": True, "data": result.value}, 201)

        >>> result = service_err("validation_error", "Validation error", [{"field": "price", "message": "..."}])
        >>> print(result.details[0]["field"])  # "price"
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None
    details: Optional[List[Dict[str, str]]] = None

    def to_dict(self) -> dict:
        """
        Convert to the API response envelope.

        Returns:
            Dictionary with 'success' and either 'data' or 'error'
        """
        if self.ok:
            return {"success": True, "data": self.value}
        payload: Dict[str, Any] = {"success": False, "error": self.error_detail}
        if self.details:
            payload["details"] = self.details
        return payload


def service_ok(value: T) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Example:
        >>> return service_ok(product)
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "", details: Optional[List[Dict[str, str]]] = None) -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g., "product_not_found", "validation_error")
        error_detail: Human-readable error message
        details: Optional field-level problems

    Returns:
        ServiceResult with ok=False and error information
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error, details=details)


class BaseService:
    """
    Base class for all catalog services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class CatalogService(BaseService):
            def __init__(self, store):
                super().__init__()
                self.store = store

            @BaseService.log_performance
            def list_products(self, params):
                self.logger.info(f"Listing products with params: {params}")
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time and any errors that occur.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Standard error codes used across catalog services."""

    # Product errors
    PRODUCT_NOT_FOUND = "product_not_found"

    # Validation errors
    VALIDATION_ERROR = "validation_error"

    # Pipeline errors
    UPLOAD_ERROR = "upload_error"
    STORE_ERROR = "store_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"

    # Internal errors
    INTERNAL_ERROR = "internal_error"
