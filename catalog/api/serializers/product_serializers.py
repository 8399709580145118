from rest_framework import serializers

from catalog.domain.models import Gender, Product, ProductStatus
from catalog.infra.store.interface import SORT_NEWEST, SORT_OPTIONS, STATUS_ALL


class ProductSerializer(serializers.ModelSerializer):
    """Full product row, as returned by listings and detail lookups"""

    category_id = serializers.UUIDField(read_only=True)
    subcategory_id = serializers.UUIDField(read_only=True, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, coerce_to_string=False, read_only=True)
    original_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, coerce_to_string=False, read_only=True, allow_null=True
    )

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "description",
            "gender",
            "category_id",
            "subcategory_id",
            "brand",
            "price",
            "original_price",
            "stock_quantity",
            "low_stock_threshold",
            "sizes",
            "colors",
            "tags",
            "image_urls",
            "status",
            "is_featured",
            "is_on_sale",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductQuerySerializer(serializers.Serializer):
    """Query parameters of the product listing"""

    gender = serializers.ChoiceField(choices=Gender.choices, required=False)
    category_id = serializers.CharField(required=False, allow_blank=True)
    category_slug = serializers.CharField(required=False, allow_blank=True)
    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    sort = serializers.ChoiceField(choices=SORT_OPTIONS, default=SORT_NEWEST)
    limit = serializers.IntegerField(min_value=1, required=False)
    offset = serializers.IntegerField(min_value=0, default=0)
    status = serializers.ChoiceField(
        choices=[*ProductStatus.values, STATUS_ALL], default=ProductStatus.ACTIVE
    )
    is_featured = serializers.BooleanField(required=False, default=False)
    is_on_sale = serializers.BooleanField(required=False, default=False)


class BulkDeleteSerializer(serializers.Serializer):
    """Body of a bulk delete"""

    product_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1)


class BulkChangesSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False)
    is_featured = serializers.BooleanField(required=False)
    is_on_sale = serializers.BooleanField(required=False)
    category_id = serializers.CharField(required=False, max_length=120, help_text="Category UUID, or a category slug")

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Nothing to update: send status, is_featured, is_on_sale or category_id")
        return attrs


class BulkUpdateSerializer(serializers.Serializer):
    """Body of a bulk update: the same changes applied to every listed product"""

    product_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1)
    updates = BulkChangesSerializer()
