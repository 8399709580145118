# Catalog API Serializers

from .category_serializers import CategoryDetailsSerializer, CategorySerializer
from .product_serializers import BulkDeleteSerializer, BulkUpdateSerializer, ProductQuerySerializer, ProductSerializer
from .response_serializers import (
    BulkDeleteResponseSerializer,
    BulkUpdateResponseSerializer,
    CategoryListResponseSerializer,
    ErrorResponseSerializer,
    ProductCreatedResponseSerializer,
    ProductCreateRequestSerializer,
    ProductDetailResponseSerializer,
    ProductListResponseSerializer,
    ProductUpdatedResponseSerializer,
    ProductUpdateRequestSerializer,
    SuccessResponseSerializer,
    ValidationErrorResponseSerializer,
)


__all__ = [
    "CategorySerializer",
    "CategoryDetailsSerializer",
    "ProductSerializer",
    "ProductQuerySerializer",
    "BulkDeleteSerializer",
    "BulkUpdateSerializer",
    # Response serializers for documentation
    "ErrorResponseSerializer",
    "ValidationErrorResponseSerializer",
    "SuccessResponseSerializer",
    "ProductCreatedResponseSerializer",
    "ProductCreateRequestSerializer",
    "ProductUpdatedResponseSerializer",
    "ProductUpdateRequestSerializer",
    "ProductListResponseSerializer",
    "ProductDetailResponseSerializer",
    "BulkDeleteResponseSerializer",
    "BulkUpdateResponseSerializer",
    "CategoryListResponseSerializer",
]
