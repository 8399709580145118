"""
Product submission validation.

Turns either transport shape (multipart form with image files, or a JSON
object) into a typed ProductDraft, or ProductChanges for a partial update.
Every offending field is reported at once, and nothing outside this module is
touched until validation passes.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from rest_framework import serializers

from catalog.conf import catalog_setting
from catalog.domain.exceptions import ProductValidationError
from catalog.domain.models import Gender, ProductStatus
from utils.logging_utils import sanitize_payload

from .category_resolver import looks_like_uuid

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "name",
    "description",
    "price",
    "original_price",
    "gender",
    "category_id",
    "category_slug",
    "subcategory_id",
    "sku",
    "stock_quantity",
    "low_stock_threshold",
    "brand",
    "status",
    "is_featured",
    "is_on_sale",
)
LIST_FIELDS = ("sizes", "colors", "tags")

LOGGED_FIELDS = ("name", "gender", "category_id", "category_slug", "sku", "status")

# Columns an update sets directly; category and images go through resolution and upload
UPDATABLE_FIELDS = (
    "name",
    "description",
    "price",
    "original_price",
    "gender",
    "subcategory_id",
    "sku",
    "stock_quantity",
    "low_stock_threshold",
    "brand",
    "status",
    "is_featured",
    "is_on_sale",
    "sizes",
    "colors",
    "tags",
)


class ProductSubmissionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    original_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=Gender.choices)
    category_id = serializers.CharField(required=False, allow_blank=True, max_length=120)
    category_slug = serializers.CharField(required=False, allow_blank=True, max_length=120)
    subcategory_id = serializers.UUIDField(required=False, allow_null=True)
    sku = serializers.CharField(required=False, allow_blank=True, max_length=64)
    stock_quantity = serializers.IntegerField(min_value=0, default=0)
    low_stock_threshold = serializers.IntegerField(min_value=0, default=5)
    brand = serializers.CharField(required=False, allow_blank=True, max_length=100)
    status = serializers.ChoiceField(choices=ProductStatus.choices, default=ProductStatus.ACTIVE)
    is_featured = serializers.BooleanField(default=False)
    is_on_sale = serializers.BooleanField(default=False)
    sizes = serializers.ListField(child=serializers.CharField(max_length=50), default=list)
    colors = serializers.ListField(child=serializers.CharField(max_length=50), default=list)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), default=list)
    image_urls = serializers.ListField(child=serializers.CharField(max_length=500), default=list)

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be positive")
        return value

    def validate_original_price(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Original price must be positive")
        return value


@dataclass
class ProductDraft:
    """A validated product, before category resolution and identifier allocation."""

    name: str
    description: str
    price: Decimal
    gender: str
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    original_price: Optional[Decimal] = None
    subcategory_id: Optional[str] = None
    sku: Optional[str] = None
    stock_quantity: int = 0
    low_stock_threshold: int = 5
    brand: str = ""
    status: str = ProductStatus.ACTIVE
    is_featured: bool = False
    is_on_sale: bool = False
    sizes: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)

    def row_values(self) -> Dict[str, Any]:
        """Columns copied verbatim onto the product row."""
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "original_price": self.original_price,
            "gender": self.gender,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "brand": self.brand,
            "is_featured": self.is_featured,
            "is_on_sale": self.is_on_sale,
            "sizes": list(self.sizes),
            "colors": list(self.colors),
            "tags": list(self.tags),
        }


@dataclass
class ProductSubmission:
    draft: ProductDraft
    images: List[Any] = field(default_factory=list)

    @property
    def has_images(self) -> bool:
        return bool(self.images or self.draft.image_urls)


@dataclass
class ProductChanges:
    """
    A validated partial update: only the fields the caller sent.

    ``image_urls`` is None when the caller did not send the list; the product
    then keeps its current images, followed by any new uploads.
    """

    values: Dict[str, Any] = field(default_factory=dict)
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    image_urls: Optional[List[str]] = None
    images: List[Any] = field(default_factory=list)

    @property
    def has_category_reference(self) -> bool:
        return bool(self.category_id or self.category_slug)

    @property
    def is_empty(self) -> bool:
        return not (self.values or self.has_category_reference or self.image_urls is not None or self.images)


def flatten_errors(errors: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Serializer errors as ``[{"field", "message"}]``; list items as ``field[index]``."""
    problems = []
    for name, messages in errors.items():
        if isinstance(messages, Mapping):
            for index, nested in messages.items():
                problems.extend(flatten_errors({f"{name}[{index}]": nested}))
            continue
        if isinstance(messages, (str, bytes)):
            messages = [messages]
        for message in messages:
            problems.append({"field": str(name), "message": str(message)})
    return problems


def _values(data: Mapping[str, Any], key: str) -> List[Any]:
    if hasattr(data, "getlist"):
        return list(data.getlist(key))
    value = data.get(key)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


class ProductSubmissionValidator:
    """
    Validates product submissions.

    Multipart forms carry every value as a string: list fields (``sizes``,
    ``colors``, ``tags``) are JSON-encoded arrays, empty strings count as
    absent, and each ``image_urls`` part is either a JSON array or a single
    URL. JSON bodies carry native types and no files.
    """

    def validate(self, data: Any, files: Sequence[Any] = (), multipart: bool = False) -> ProductSubmission:
        payload, problems = self._payload(data, multipart, partial=False)

        serializer = ProductSubmissionSerializer(data=payload)
        if not serializer.is_valid():
            problems.extend(flatten_errors(serializer.errors))

        if not self._has_category_reference(payload):
            problems.append({"field": "category_id", "message": "A category_id or category_slug is required"})

        if problems:
            self._reject(payload, problems)

        draft = self._build_draft(serializer.validated_data)
        return ProductSubmission(draft=draft, images=list(files) if multipart else [])

    def validate_update(self, data: Any, files: Sequence[Any] = (), multipart: bool = False) -> ProductChanges:
        """
        Validate a partial update.

        Every field is optional and no defaults are filled in. A multipart
        form replaces the image list only when it carries ``image_urls``
        parts; new files are appended after the kept URLs.

        Raises:
            ProductValidationError: a field is malformed, or nothing would change
        """
        payload, problems = self._payload(data, multipart, partial=True)

        serializer = ProductSubmissionSerializer(data=payload, partial=True)
        if not serializer.is_valid():
            problems.extend(flatten_errors(serializer.errors))

        if problems:
            self._reject(payload, problems)

        changes = self._build_changes(serializer.validated_data, list(files) if multipart else [])
        if changes.is_empty:
            raise ProductValidationError.for_field("body", "No fields to update")
        return changes

    def _payload(self, data: Any, multipart: bool, partial: bool) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
        if multipart:
            return self._from_form(data, partial=partial)
        if isinstance(data, Mapping):
            return dict(data), []
        raise ProductValidationError.for_field("body", "Expected a JSON object")

    @staticmethod
    def _reject(payload: Mapping[str, Any], problems: List[Dict[str, str]]) -> None:
        logger.info(
            f"Rejected product submission {sanitize_payload(payload, LOGGED_FIELDS)}: "
            f"{[problem['field'] for problem in problems]}"
        )
        raise ProductValidationError(problems)

    def _from_form(
        self, data: Mapping[str, Any], partial: bool = False
    ) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
        payload: Dict[str, Any] = {}
        problems: List[Dict[str, str]] = []

        for name in SCALAR_FIELDS:
            value = data.get(name)
            if value is None or value == "":
                continue
            payload[name] = value

        for name in LIST_FIELDS:
            raw = data.get(name)
            if raw is None or raw == "":
                continue
            try:
                parsed = json.loads(raw)
            except (TypeError, ValueError):
                problems.append({"field": name, "message": "Must be a JSON-encoded array"})
                continue
            if not isinstance(parsed, list):
                problems.append({"field": name, "message": "Must be a JSON-encoded array"})
                continue
            payload[name] = parsed

        image_urls: List[Any] = []
        for raw in _values(data, "image_urls"):
            if raw is None or raw == "":
                continue
            try:
                parsed = json.loads(raw)
            except (TypeError, ValueError):
                image_urls.append(raw)
                continue
            if isinstance(parsed, list):
                image_urls.extend(parsed)
            else:
                image_urls.append(parsed if isinstance(parsed, str) else raw)
        if not partial or "image_urls" in data:
            payload["image_urls"] = image_urls

        return payload, problems

    @staticmethod
    def _has_category_reference(payload: Mapping[str, Any]) -> bool:
        for name in ("category_id", "category_slug"):
            value = payload.get(name)
            if isinstance(value, str) and value.strip():
                return True
        return False

    @staticmethod
    def _category_reference(data: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
        category_id = (data.get("category_id") or "").strip() or None
        category_slug = (data.get("category_slug") or "").strip() or None

        # category_id carries either a real id or a slug-like reference
        if category_id and not looks_like_uuid(category_id):
            category_slug = category_slug or category_id
            category_id = None
        return category_id, category_slug

    def _build_changes(self, data: Dict[str, Any], images: List[Any]) -> ProductChanges:
        category_id, category_slug = self._category_reference(data)
        values = {name: data[name] for name in UPDATABLE_FIELDS if name in data}

        if "sku" in values:
            values["sku"] = (values["sku"] or "").strip()
            if not values["sku"]:
                del values["sku"]
        if "brand" in values:
            values["brand"] = (values["brand"] or "").strip() or catalog_setting("DEFAULT_BRAND")
        if "subcategory_id" in values:
            values["subcategory_id"] = str(values["subcategory_id"]) if values["subcategory_id"] else None
        for name in LIST_FIELDS:
            if name in values:
                values[name] = list(values[name])

        image_urls = data.get("image_urls")
        return ProductChanges(
            values=values,
            category_id=category_id,
            category_slug=category_slug,
            image_urls=list(image_urls) if image_urls is not None else None,
            images=images,
        )

    def _build_draft(self, data: Dict[str, Any]) -> ProductDraft:
        category_id, category_slug = self._category_reference(data)
        subcategory_id = data.get("subcategory_id")

        return ProductDraft(
            name=data["name"],
            description=data["description"],
            price=data["price"],
            gender=data["gender"],
            category_id=category_id,
            category_slug=category_slug,
            original_price=data.get("original_price"),
            subcategory_id=str(subcategory_id) if subcategory_id else None,
            sku=(data.get("sku") or "").strip() or None,
            stock_quantity=data["stock_quantity"],
            low_stock_threshold=data["low_stock_threshold"],
            brand=(data.get("brand") or "").strip() or catalog_setting("DEFAULT_BRAND"),
            status=data["status"],
            is_featured=data["is_featured"],
            is_on_sale=data["is_on_sale"],
            sizes=list(data["sizes"]),
            colors=list(data["colors"]),
            tags=list(data["tags"]),
            image_urls=list(data["image_urls"]),
        )
