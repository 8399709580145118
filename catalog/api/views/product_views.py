import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from catalog.api.permissions import HasAdminSessionCookies, has_admin_session
from catalog.api.serializers import (
    BulkDeleteResponseSerializer,
    BulkDeleteSerializer,
    BulkUpdateResponseSerializer,
    BulkUpdateSerializer,
    CategoryDetailsSerializer,
    ErrorResponseSerializer,
    ProductCreatedResponseSerializer,
    ProductCreateRequestSerializer,
    ProductDetailResponseSerializer,
    ProductListResponseSerializer,
    ProductQuerySerializer,
    ProductSerializer,
    ProductUpdatedResponseSerializer,
    ProductUpdateRequestSerializer,
    SuccessResponseSerializer,
    ValidationErrorResponseSerializer,
)
from catalog.domain.services import CatalogService, ErrorCodes, ProductIngestionService
from catalog.domain.services.category_resolver import looks_like_uuid
from catalog.domain.services.validation import flatten_errors
from infrastructure.container import container


logger = logging.getLogger(__name__)

STATUS_FOR_ERROR = {
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}

ADMIN_ACTIONS = ("create", "update", "partial_update", "destroy", "bulk_update", "bulk_delete")


def error_response(result) -> Response:
    return Response(
        result.to_dict(),
        status=STATUS_FOR_ERROR.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def validation_error_response(serializer) -> Response:
    return Response(
        {"success": False, "error": "Validation error", "details": flatten_errors(serializer.errors)},
        status=status.HTTP_400_BAD_REQUEST,
    )


def not_found_response() -> Response:
    return Response({"success": False, "error": "Product not found"}, status=status.HTTP_404_NOT_FOUND)


ADMIN_COOKIE_PARAMETERS = [
    OpenApiParameter(name="admin_session", type=str, location=OpenApiParameter.COOKIE, required=True),
    OpenApiParameter(name="sb-access-token", type=str, location=OpenApiParameter.COOKIE, required=True),
]

UPDATE_SCHEMA = dict(
    description=(
        "Partial update: only the fields sent change. A new name re-allocates the slug. Multipart `images` "
        "are uploaded under the product's prefix and appended after the kept `image_urls`; images the product "
        "no longer lists are removed from storage. A failed update removes its own uploads."
    ),
    request={
        "multipart/form-data": ProductUpdateRequestSerializer,
        "application/json": ProductUpdateRequestSerializer,
    },
    parameters=ADMIN_COOKIE_PARAMETERS,
    responses={
        200: OpenApiResponse(response=ProductUpdatedResponseSerializer, description="Product updated"),
        400: OpenApiResponse(response=ValidationErrorResponseSerializer, description="Invalid data"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin cookies missing"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        500: OpenApiResponse(response=ErrorResponseSerializer, description="Upload or store failure"),
    },
    tags=["Catalog - Products"],
)


class ProductViewSet(viewsets.ViewSet):
    """
    ViewSet for products using the Service Layer.

    Reads are public (active products only unless the admin cookies are
    present); every write sits behind the admin cookie gate.
    """

    lookup_field = "id_or_slug"
    lookup_value_regex = "[^/]+"

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [HasAdminSessionCookies()]
        return [AllowAny()]

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def get_ingestion_service(self) -> ProductIngestionService:
        return container.ingestion_service()

    @extend_schema(
        operation_id="products_list",
        summary="List products with filters",
        description=(
            "Filter by gender, category (id or slug, gender-scoped first), search text, "
            "featured and on-sale flags. An unknown category slug yields an empty list."
        ),
        parameters=[ProductQuerySerializer],
        responses={
            200: OpenApiResponse(response=ProductListResponseSerializer, description="Products retrieved"),
            400: OpenApiResponse(response=ValidationErrorResponseSerializer, description="Malformed parameters"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Catalog - Products"],
    )
    def list(self, request):
        query = ProductQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query)

        result = self.get_service().list_products(query.validated_data, include_unpublished=has_admin_session(request))
        if not result.ok:
            return error_response(result)

        serializer = ProductSerializer(result.value["results"], many=True)
        return Response({"success": True, "data": serializer.data, "count": result.value["count"]})

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product details by id or slug",
        responses={
            200: OpenApiResponse(response=ProductDetailResponseSerializer, description="Product with category details"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Catalog - Products"],
    )
    def retrieve(self, request, id_or_slug=None):
        result = self.get_service().get_product(id_or_slug, include_unpublished=has_admin_session(request))
        if not result.ok:
            return error_response(result)

        category = result.value["category"]
        data = ProductSerializer(result.value["product"]).data
        data["category_details"] = CategoryDetailsSerializer(category).data if category else None
        return Response({"success": True, "data": data})

    @extend_schema(
        operation_id="products_create",
        summary="Create a product (admin)",
        description=(
            "Multipart form (with `images` files) or JSON. Images are uploaded to object storage; "
            "any failure after the product row is written removes the row and the uploaded images."
        ),
        request={
            "multipart/form-data": ProductCreateRequestSerializer,
            "application/json": ProductCreateRequestSerializer,
        },
        parameters=ADMIN_COOKIE_PARAMETERS,
        responses={
            201: OpenApiResponse(response=ProductCreatedResponseSerializer, description="Product created"),
            400: OpenApiResponse(response=ValidationErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin cookies missing"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Upload or store failure"),
        },
        tags=["Catalog - Products"],
    )
    def create(self, request):
        multipart = (request.content_type or "").startswith("multipart/form-data")
        files = request.FILES.getlist("images") if multipart else []

        result = self.get_ingestion_service().create_product(request.data, files, multipart=multipart)
        if not result.ok:
            return error_response(result)

        return Response(
            {"success": True, "data": result.value.to_dict(), "message": "Product created successfully"},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="products_destroy",
        summary="Delete a product (admin)",
        description="Deletes the product, then removes its stored images best-effort.",
        responses={
            200: OpenApiResponse(response=SuccessResponseSerializer, description="Product deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin cookies missing"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Catalog - Products"],
    )
    def destroy(self, request, id_or_slug=None):
        if not looks_like_uuid(id_or_slug):
            return not_found_response()

        result = self.get_service().delete_product(id_or_slug)
        if not result.ok:
            return error_response(result)

        return Response({"success": True, "message": "Product deleted successfully"})

    @extend_schema(operation_id="products_update", summary="Update a product (admin)", **UPDATE_SCHEMA)
    def update(self, request, id_or_slug=None):
        return self._update(request, id_or_slug)

    @extend_schema(
        operation_id="products_partial_update", summary="Update some fields of a product (admin)", **UPDATE_SCHEMA
    )
    def partial_update(self, request, id_or_slug=None):
        return self._update(request, id_or_slug)

    def _update(self, request, id_or_slug):
        # PUT and PATCH are both partial
        if not looks_like_uuid(id_or_slug):
            return not_found_response()

        multipart = (request.content_type or "").startswith("multipart/form-data")
        files = request.FILES.getlist("images") if multipart else []

        result = self.get_ingestion_service().update_product(id_or_slug, request.data, files, multipart=multipart)
        if not result.ok:
            return error_response(result)

        return Response(
            {"success": True, "data": ProductSerializer(result.value).data, "message": "Product updated successfully"}
        )

    @extend_schema(
        operation_id="products_bulk_update",
        summary="Update status, flags or category of many products (admin)",
        request=BulkUpdateSerializer,
        parameters=ADMIN_COOKIE_PARAMETERS,
        responses={
            200: OpenApiResponse(response=BulkUpdateResponseSerializer, description="Products updated"),
            400: OpenApiResponse(response=ValidationErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin cookies missing"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Store failure"),
        },
        tags=["Catalog - Products"],
    )
    @action(detail=False, methods=["put"], url_path="bulk", url_name="bulk")
    def bulk_update(self, request):
        serializer = BulkUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        product_ids = [str(product_id) for product_id in serializer.validated_data["product_ids"]]
        result = self.get_service().bulk_update(product_ids, serializer.validated_data["updates"])
        if not result.ok:
            return error_response(result)

        updated = result.value
        return Response(
            {
                "success": True,
                "message": f"Successfully updated {len(updated)} product(s)",
                "updated_count": len(updated),
                "data": [{"id": product_id} for product_id in updated],
            }
        )

    @extend_schema(
        operation_id="products_bulk_delete",
        summary="Delete many products (admin)",
        description="Ids that match no product are ignored; their stored images are removed best-effort.",
        request=BulkDeleteSerializer,
        parameters=ADMIN_COOKIE_PARAMETERS,
        responses={
            200: OpenApiResponse(response=BulkDeleteResponseSerializer, description="Products deleted"),
            400: OpenApiResponse(response=ValidationErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin cookies missing"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="None of the products exist"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Store failure"),
        },
        tags=["Catalog - Products"],
    )
    @bulk_update.mapping.delete
    def bulk_delete(self, request):
        serializer = BulkDeleteSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        product_ids = [str(product_id) for product_id in serializer.validated_data["product_ids"]]
        result = self.get_service().bulk_delete(product_ids)
        if not result.ok:
            return error_response(result)

        return Response(
            {
                "success": True,
                "message": f"Successfully deleted {result.value} product(s)",
                "deleted_count": result.value,
            }
        )
