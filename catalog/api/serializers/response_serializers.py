"""
Response Serializers for Catalog API Documentation

These serializers define the structure of API responses for OpenAPI schema generation.
They are NOT used for data validation, only for documentation in Swagger/ReDoc.
"""

from rest_framework import serializers

from catalog.domain.models import Gender, ProductStatus

from .category_serializers import CategoryDetailsSerializer, CategorySerializer
from .product_serializers import ProductSerializer

# ===== Common Response Serializers =====


class FieldErrorSerializer(serializers.Serializer):
    field = serializers.CharField(help_text="Offending field; list items as field[index]")
    message = serializers.CharField(help_text="What is wrong with it")


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    success = serializers.BooleanField(default=False)
    error = serializers.CharField(help_text="Human-readable error message")


class ValidationErrorResponseSerializer(ErrorResponseSerializer):
    details = FieldErrorSerializer(many=True, help_text="Every offending field")


class SuccessResponseSerializer(serializers.Serializer):
    """Generic success response"""

    success = serializers.BooleanField(default=True)
    message = serializers.CharField(help_text="Success message")


# ===== Product Response Serializers =====


class CreatedProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    slug = serializers.CharField()


class ProductCreatedResponseSerializer(SuccessResponseSerializer):
    data = CreatedProductSerializer()


class ProductListResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    data = ProductSerializer(many=True)
    count = serializers.IntegerField(help_text="Total number of matching products")


class ProductDetailSerializer(ProductSerializer):
    category_details = CategoryDetailsSerializer(allow_null=True)

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ["category_details"]


class ProductDetailResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    data = ProductDetailSerializer()


class ProductCreateRequestSerializer(serializers.Serializer):
    """Request body for creating a product (multipart form or JSON)"""

    name = serializers.CharField(max_length=200, help_text="Product name")
    description = serializers.CharField(help_text="Full product description")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, help_text="Price, greater than zero")
    original_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, help_text="Price before discount"
    )
    gender = serializers.ChoiceField(choices=Gender.values)
    category_id = serializers.CharField(required=False, help_text="Category UUID, or a category slug")
    category_slug = serializers.CharField(required=False, help_text="Category slug (gender-scoped first)")
    subcategory_id = serializers.UUIDField(required=False)
    sku = serializers.CharField(required=False, help_text="Requested SKU; disambiguated when taken")
    stock_quantity = serializers.IntegerField(required=False, min_value=0)
    low_stock_threshold = serializers.IntegerField(required=False, min_value=0)
    brand = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=ProductStatus.values, required=False)
    is_featured = serializers.BooleanField(required=False)
    is_on_sale = serializers.BooleanField(required=False)
    sizes = serializers.ListField(child=serializers.CharField(), required=False, help_text="JSON array in forms")
    colors = serializers.ListField(child=serializers.CharField(), required=False, help_text="JSON array in forms")
    tags = serializers.ListField(child=serializers.CharField(), required=False, help_text="JSON array in forms")
    image_urls = serializers.ListField(
        child=serializers.CharField(), required=False, help_text="Already hosted images, listed before uploads"
    )
    images = serializers.ListField(
        child=serializers.ImageField(), required=False, help_text="Up to 10 JPEG/PNG/WebP files, 5MB each"
    )


class ProductUpdatedResponseSerializer(SuccessResponseSerializer):
    data = ProductSerializer()


class ProductUpdateRequestSerializer(ProductCreateRequestSerializer):
    """Request body for a partial update: every field optional, absent fields unchanged"""

    name = serializers.CharField(max_length=200, required=False, help_text="New name; re-allocates the slug")
    description = serializers.CharField(required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    gender = serializers.ChoiceField(choices=Gender.values, required=False)
    image_urls = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        help_text="Images to keep, in order; new uploads follow. Omit to keep the current images",
    )


class BulkDeleteResponseSerializer(SuccessResponseSerializer):
    deleted_count = serializers.IntegerField()


class UpdatedIdSerializer(serializers.Serializer):
    id = serializers.UUIDField()


class BulkUpdateResponseSerializer(SuccessResponseSerializer):
    updated_count = serializers.IntegerField()
    data = UpdatedIdSerializer(many=True)


# ===== Category Response Serializers =====


class CategoryListResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    data = CategorySerializer(many=True)
    count = serializers.IntegerField()
