from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from catalog.api.serializers import CategoryListResponseSerializer, CategorySerializer, ErrorResponseSerializer
from catalog.domain.models import Gender
from catalog.domain.services import CatalogService
from infrastructure.container import container


class CategoryViewSet(viewsets.ViewSet):
    """
    ViewSet for categories - read-only operations using Service Layer
    """

    permission_classes = [AllowAny]

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    @extend_schema(
        summary="List categories",
        description="Categories ordered by name, optionally for one gender.",
        parameters=[OpenApiParameter(name="gender", type=str, enum=Gender.values, description="Filter by gender")],
        responses={
            200: OpenApiResponse(response=CategoryListResponseSerializer, description="Categories retrieved"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Catalog - Categories"],
    )
    def list(self, request):
        result = self.get_service().list_categories(request.query_params.get("gender"))

        if not result.ok:
            return Response(result.to_dict(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        serializer = CategorySerializer(result.value, many=True)
        return Response({"success": True, "data": serializer.data, "count": len(serializer.data)})
