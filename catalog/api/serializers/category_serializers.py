from rest_framework import serializers

from catalog.domain.models import Category


class CategoryDetailsSerializer(serializers.ModelSerializer):
    """Category summary embedded in product detail responses"""

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "gender"]
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    description = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "gender", "description", "image_url", "created_at"]
        read_only_fields = fields

    def get_description(self, obj):
        return obj.description or f"{obj.name} collection"
