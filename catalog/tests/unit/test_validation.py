import json
import uuid
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.http import QueryDict

from catalog.domain.exceptions import ProductValidationError
from catalog.domain.services.validation import ProductSubmissionValidator, flatten_errors


def form(**fields):
    data = QueryDict("", mutable=True)
    for name, value in fields.items():
        if isinstance(value, list):
            data.setlist(name, value)
        else:
            data[name] = value
    return data


@pytest.fixture
def validator():
    return ProductSubmissionValidator()


@pytest.fixture
def payload():
    return {
        "name": "Classic Tee",
        "description": "Heavyweight cotton tee",
        "price": 19.99,
        "gender": "mens",
        "category_slug": "t-shirts",
    }


def fields_of(excinfo):
    return [problem["field"] for problem in excinfo.value.details]


@pytest.mark.unit
class TestJsonSubmissions:
    def test_defaults_are_applied(self, validator, payload):
        draft = validator.validate(payload).draft

        assert draft.price == Decimal("19.99")
        assert draft.brand == "MHCloth"
        assert draft.stock_quantity == 0
        assert draft.low_stock_threshold == 5
        assert draft.status == "active"
        assert draft.sizes == [] and draft.colors == [] and draft.tags == []
        assert draft.category_slug == "t-shirts"
        assert draft.category_id is None

    def test_every_offending_field_is_reported(self, validator):
        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate({"name": "   ", "price": 0, "gender": "aliens"})

        assert set(fields_of(excinfo)) == {"name", "description", "price", "gender", "category_id"}

    def test_list_item_errors_name_the_index(self, validator, payload):
        payload["sizes"] = ["S", None, "L"]

        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate(payload)

        assert fields_of(excinfo) == ["sizes[1]"]

    @pytest.mark.parametrize("field, value", [("price", -5), ("price", "abc"), ("original_price", 0)])
    def test_prices_must_be_positive_numbers(self, validator, payload, field, value):
        payload[field] = value

        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate(payload)

        assert fields_of(excinfo) == [field]

    def test_uuid_category_id_is_explicit(self, validator, payload):
        category_id = str(uuid.uuid4())
        payload["category_id"] = category_id

        draft = validator.validate(payload).draft

        assert draft.category_id == category_id

    def test_slug_in_category_id_becomes_slug_reference(self, validator, payload):
        del payload["category_slug"]
        payload["category_id"] = "hoodies"

        draft = validator.validate(payload).draft

        assert draft.category_id is None
        assert draft.category_slug == "hoodies"

    def test_invalid_subcategory_id(self, validator, payload):
        payload["subcategory_id"] = "not-a-uuid"

        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate(payload)

        assert fields_of(excinfo) == ["subcategory_id"]

    def test_body_must_be_an_object(self, validator):
        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate([{"name": "Tee"}])

        assert fields_of(excinfo) == ["body"]

    def test_files_are_ignored_outside_multipart(self, validator, payload):
        image = SimpleUploadedFile("a.jpg", b"jpeg", content_type="image/jpeg")

        submission = validator.validate(payload, files=[image])

        assert submission.images == []
        assert not submission.has_images

    def test_image_urls_mark_submission_as_having_images(self, validator, payload):
        payload["image_urls"] = ["https://cdn.example.com/a.jpg"]

        assert validator.validate(payload).has_images


@pytest.mark.unit
class TestMultipartSubmissions:
    def test_form_values_are_coerced(self, validator):
        data = form(
            name="Zip Hoodie",
            description="Fleece lined",
            price="49.50",
            original_price="",
            gender="womens",
            category_id="hoodies",
            stock_quantity="12",
            brand="",
            is_featured="true",
            sizes=json.dumps(["S", "M"]),
            colors="",
        )

        draft = validator.validate(data, multipart=True).draft

        assert draft.price == Decimal("49.50")
        assert draft.original_price is None
        assert draft.stock_quantity == 12
        assert draft.brand == "MHCloth"
        assert draft.is_featured is True
        assert draft.sizes == ["S", "M"]
        assert draft.colors == []
        assert draft.category_slug == "hoodies"

    def test_malformed_list_fields_are_reported_with_other_errors(self, validator):
        data = form(name="Tee", description="d", price="0", gender="mens", category_slug="t-shirts",
                    sizes="[S, M", tags=json.dumps({"a": 1}))

        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate(data, multipart=True)

        assert set(fields_of(excinfo)) == {"sizes", "tags", "price"}

    def test_non_numeric_stock(self, validator):
        data = form(name="Tee", description="d", price="10", gender="mens", category_slug="t-shirts",
                    stock_quantity="lots")

        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate(data, multipart=True)

        assert fields_of(excinfo) == ["stock_quantity"]

    def test_image_url_parts_keep_their_order(self, validator):
        data = form(
            name="Tee",
            description="d",
            price="10",
            gender="mens",
            category_slug="t-shirts",
            image_urls=[json.dumps(["https://cdn/a.jpg", "https://cdn/b.jpg"]), "https://cdn/c.jpg"],
        )

        draft = validator.validate(data, multipart=True).draft

        assert draft.image_urls == ["https://cdn/a.jpg", "https://cdn/b.jpg", "https://cdn/c.jpg"]

    def test_files_are_kept_in_receipt_order(self, validator):
        first = SimpleUploadedFile("c.jpg", b"1", content_type="image/jpeg")
        second = SimpleUploadedFile("d.png", b"2", content_type="image/png")
        data = form(name="Tee", description="d", price="10", gender="mens", category_slug="t-shirts")

        submission = validator.validate(data, files=[first, second], multipart=True)

        assert submission.images == [first, second]


@pytest.mark.unit
class TestUpdates:
    def test_only_sent_fields_change(self, validator):
        changes = validator.validate_update({"price": "24.00", "is_on_sale": True})

        assert changes.values == {"price": Decimal("24.00"), "is_on_sale": True}
        assert changes.image_urls is None
        assert not changes.has_category_reference

    def test_malformed_fields_are_reported(self, validator):
        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate_update({"price": -1, "gender": "kids"})

        assert set(fields_of(excinfo)) == {"price", "gender"}

    def test_nothing_to_change_is_rejected(self, validator):
        with pytest.raises(ProductValidationError) as excinfo:
            validator.validate_update({})

        assert fields_of(excinfo) == ["body"]

    def test_category_slug_in_category_id(self, validator):
        changes = validator.validate_update({"category_id": "hoodies"})

        assert changes.category_id is None
        assert changes.category_slug == "hoodies"
        assert not changes.is_empty

    def test_blank_brand_falls_back_to_default(self, validator):
        assert validator.validate_update({"brand": "  "}).values["brand"] == "MHCloth"

    def test_form_without_image_urls_keeps_current_images(self, validator):
        upload = SimpleUploadedFile("a.jpg", b"\xff\xd8\xff", content_type="image/jpeg")

        changes = validator.validate_update(form(name="Zip Hoodie"), [upload], multipart=True)

        assert changes.values == {"name": "Zip Hoodie"}
        assert changes.image_urls is None
        assert changes.images == [upload]

    def test_form_image_urls_replace_the_list(self, validator):
        data = form(image_urls=["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"])

        changes = validator.validate_update(data, multipart=True)

        assert changes.image_urls == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]

    def test_files_alone_are_a_change(self, validator):
        upload = SimpleUploadedFile("a.jpg", b"\xff\xd8\xff", content_type="image/jpeg")

        assert not validator.validate_update(form(), [upload], multipart=True).is_empty


@pytest.mark.unit
def test_flatten_errors_handles_nested_list_errors():
    errors = {"price": ["Price must be positive"], "tags": {2: ["Not a valid string."]}}

    assert flatten_errors(errors) == [
        {"field": "price", "message": "Price must be positive"},
        {"field": "tags[2]", "message": "Not a valid string."},
    ]
