import json
import uuid
from decimal import Decimal
from io import BytesIO
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.http import QueryDict

from catalog.domain.exceptions import StoreError, UniqueConstraintViolation
from catalog.domain.models import Gender, Product, ProductStatus
from catalog.domain.services import ErrorCodes, ProductIngestionService
from catalog.domain.services.deadline import Deadline
from catalog.infra.store import DjangoCatalogStore
from catalog.tests.factories import CategoryFactory, ProductFactory, submission_payload
from infrastructure.storage import InMemoryStorageAdapter, StorageException


def image(name="photo.jpg", content=b"\xff\xd8\xff\xe0", content_type="image/jpeg"):
    return SimpleUploadedFile(name, content, content_type=content_type)


def form(payload):
    """Multipart rendition of a JSON payload."""
    data = QueryDict("", mutable=True)
    for name, value in payload.items():
        data[name] = json.dumps(value) if isinstance(value, list) else str(value)
    return data


class FlakyStorage(InMemoryStorageAdapter):
    """Fails the upload at ``fail_at`` (0-based)."""

    def __init__(self, fail_at):
        super().__init__()
        self.fail_at = fail_at
        self.calls = 0

    def upload(self, file, path, content_type, make_public=True):
        index = self.calls
        self.calls += 1
        if index == self.fail_at:
            raise StorageException("bucket unavailable")
        return super().upload(file, path, content_type, make_public)


class SlowStorage(InMemoryStorageAdapter):
    """Advances a fake clock on every upload."""

    def __init__(self, clock, seconds_per_upload):
        super().__init__()
        self.clock = clock
        self.seconds_per_upload = seconds_per_upload

    def upload(self, file, path, content_type, make_public=True):
        stored = super().upload(file, path, content_type, make_public)
        self.clock.now += self.seconds_per_upload
        return stored


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def category(db):
    return CategoryFactory(slug="t-shirts", gender=Gender.MENS)


@pytest.fixture
def storage():
    return InMemoryStorageAdapter()


@pytest.fixture
def service(storage):
    return ProductIngestionService(store=DjangoCatalogStore(), storage=storage)


@pytest.mark.unit
@pytest.mark.django_db
class TestCreateProduct:
    def test_json_create_without_images(self, service, category):
        result = service.create_product(submission_payload(category, name="Classic Tee"))

        assert result.ok
        assert result.value.slug == "classic-tee"
        product = Product.objects.get(id=result.value.id)
        assert product.category_id == category.id
        assert product.status == ProductStatus.ACTIVE
        assert product.sku == "MEN-000001"
        assert product.brand == "MHCloth"
        assert product.image_urls == []

    def test_multipart_create_uploads_images_in_order(self, service, storage, category):
        files = [image("front.jpg"), image("back.png", content_type="image/png")]

        result = service.create_product(form(submission_payload(category)), files, multipart=True)

        assert result.ok
        product = Product.objects.get(id=result.value.id)
        assert len(product.image_urls) == 2
        assert product.image_urls[0].endswith(".jpg")
        assert product.image_urls[1].endswith(".png")
        assert storage.keys() == sorted(url.split("/product-images/")[1] for url in product.image_urls)
        assert all(key.startswith(f"products/{product.id}/") for key in storage.keys())

    def test_existing_urls_precede_uploaded_ones(self, service, category):
        data = form(submission_payload(category))
        data["image_urls"] = json.dumps(["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"])

        result = service.create_product(data, [image("c.jpg"), image("d.jpg")], multipart=True)

        urls = Product.objects.get(id=result.value.id).image_urls
        assert urls[:2] == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
        assert len(urls) == 4

    def test_product_with_images_is_draft_until_attached(self, service, category):
        statuses = []
        attach = service.writer.attach_images

        def record_status(product_id, urls, status=None):
            statuses.append(Product.objects.get(id=product_id).status)
            return attach(product_id, urls, status=status)

        with patch.object(service.writer, "attach_images", side_effect=record_status):
            result = service.create_product(form(submission_payload(category)), [image()], multipart=True)

        assert statuses == [ProductStatus.DRAFT]
        assert Product.objects.get(id=result.value.id).status == ProductStatus.ACTIVE

    def test_requested_draft_status_is_kept(self, service, category):
        result = service.create_product(submission_payload(category, status="draft"))

        assert Product.objects.get(id=result.value.id).status == ProductStatus.DRAFT

    def test_repeated_names_get_numbered_slugs(self, service, category):
        slugs = [
            service.create_product(submission_payload(category, name="Classic Tee")).value.slug for _ in range(3)
        ]

        assert slugs == ["classic-tee", "classic-tee-2", "classic-tee-3"]

    def test_requested_sku_is_kept_when_free(self, service, category):
        result = service.create_product(submission_payload(category, sku="TEE-RED"))

        assert Product.objects.get(id=result.value.id).sku == "TEE-RED"

    def test_taken_sku_is_disambiguated(self, service, category):
        ProductFactory(category=category, sku="TEE-RED")

        result = service.create_product(submission_payload(category, sku="TEE-RED"))

        assert Product.objects.get(id=result.value.id).sku == "TEE-RED-1"

    def test_slug_race_retries_with_next_candidate(self, service, category):
        ProductFactory(category=category, name="Classic Tee", slug="classic-tee")

        # Another request took the slug between the lookup and the insert
        with patch.object(DjangoCatalogStore, "slug_exists", return_value=False):
            result = service.create_product(submission_payload(category, name="Classic Tee"))

        assert result.ok
        assert result.value.slug == "classic-tee-2"

    def test_gives_up_after_repeated_conflicts(self, service, category):
        conflict = UniqueConstraintViolation("sku", "MEN-000001")

        with patch.object(DjangoCatalogStore, "insert", side_effect=conflict) as insert:
            result = service.create_product(submission_payload(category))

        assert not result.ok
        assert result.error == ErrorCodes.STORE_ERROR
        assert insert.call_count == 5

    def test_resolves_category_by_gender_first(self, service, category):
        kids = CategoryFactory(slug="t-shirts", gender=Gender.KIDS)

        result = service.create_product(submission_payload(category, gender="kids"))

        assert Product.objects.get(id=result.value.id).category_id == kids.id

    def test_category_id_given_as_slug(self, service, category):
        payload = submission_payload(category)
        del payload["category_slug"]
        payload["category_id"] = "t-shirts"

        result = service.create_product(payload)

        assert Product.objects.get(id=result.value.id).category_id == category.id


@pytest.mark.unit
@pytest.mark.django_db
class TestRejectedSubmissions:
    def test_validation_error_touches_nothing(self, service, storage, category):
        with patch.object(DjangoCatalogStore, "insert") as insert:
            result = service.create_product(form({"name": "Tee", "price": "-1"}), [image()], multipart=True)

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR
        fields = {problem["field"] for problem in result.details}
        assert {"price", "description", "gender", "category_id"} <= fields
        insert.assert_not_called()
        assert storage.keys() == []

    def test_unknown_category_is_validation_error(self, service, category):
        result = service.create_product(submission_payload(category, category_slug="no-such-thing"))

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details[0]["field"] == "category_id"
        assert Product.objects.count() == 0

    def test_missing_subcategory_is_validation_error(self, service, category):
        result = service.create_product(submission_payload(category, subcategory_id=str(uuid.uuid4())))

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details[0]["field"] == "subcategory_id"
        assert Product.objects.count() == 0

    def test_image_limits_are_checked_before_insert(self, service, storage, category):
        files = [image(f"{n}.jpg") for n in range(11)]

        result = service.create_product(form(submission_payload(category)), files, multipart=True)

        assert result.error == ErrorCodes.UPLOAD_ERROR
        assert Product.objects.count() == 0
        assert storage.keys() == []

    def test_json_body_must_be_an_object(self, service):
        result = service.create_product(["not", "an", "object"])

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details == [{"field": "body", "message": "Expected a JSON object"}]


@pytest.mark.unit
@pytest.mark.django_db
class TestRollback:
    @pytest.mark.parametrize("fail_at", [0, 1, 2])
    def test_failed_upload_leaves_no_row_and_no_objects(self, category, fail_at):
        storage = FlakyStorage(fail_at)
        service = ProductIngestionService(store=DjangoCatalogStore(), storage=storage)
        files = [image("1.jpg"), image("2.jpg"), image("3.jpg")]

        result = service.create_product(form(submission_payload(category)), files, multipart=True)

        assert not result.ok
        assert result.error == ErrorCodes.UPLOAD_ERROR
        assert Product.objects.count() == 0
        assert storage.keys() == []

    def test_failed_attach_rolls_back(self, service, storage, category):
        with patch.object(service.writer, "attach_images", side_effect=StoreError("update failed")):
            result = service.create_product(form(submission_payload(category)), [image(), image()], multipart=True)

        assert result.error == ErrorCodes.STORE_ERROR
        assert Product.objects.count() == 0
        assert storage.keys() == []

    def test_deadline_between_uploads_rolls_back(self, category):
        clock = FakeClock()
        storage = SlowStorage(clock, seconds_per_upload=20)
        service = ProductIngestionService(
            store=DjangoCatalogStore(),
            storage=storage,
            deadline_factory=lambda: Deadline(30, clock=clock),
        )
        files = [image("1.jpg"), image("2.jpg"), image("3.jpg")]

        result = service.create_product(form(submission_payload(category)), files, multipart=True)

        assert result.error == ErrorCodes.DEADLINE_EXCEEDED
        assert Product.objects.count() == 0
        assert storage.keys() == []

    def test_failed_rollback_still_reports_original_error(self, category):
        storage = FlakyStorage(fail_at=1)
        service = ProductIngestionService(store=DjangoCatalogStore(), storage=storage)

        with patch.object(DjangoCatalogStore, "delete", side_effect=StoreError("connection lost")):
            result = service.create_product(form(submission_payload(category)), [image(), image()], multipart=True)

        assert result.error == ErrorCodes.UPLOAD_ERROR
        assert storage.keys() == []

    def test_unexpected_error_is_internal(self, service, category):
        with patch.object(service.images, "ingest", side_effect=RuntimeError("boom")):
            result = service.create_product(form(submission_payload(category)), [image()], multipart=True)

        assert result.error == ErrorCodes.INTERNAL_ERROR
        assert result.error_detail == "Internal server error"
        assert Product.objects.count() == 0


@pytest.fixture
def tee(category):
    return ProductFactory(
        category=category,
        name="Crew Tee",
        slug="crew-tee",
        sku="MEN-CREW",
        price=Decimal("10.00"),
        stock_quantity=7,
        is_featured=True,
        image_urls=["https://cdn.example.com/front.jpg", "https://cdn.example.com/back.jpg"],
    )


@pytest.mark.unit
@pytest.mark.django_db
class TestUpdateProduct:
    def test_only_sent_fields_change(self, service, tee):
        result = service.update_product(str(tee.id), {"price": "25.00"})

        assert result.ok
        tee.refresh_from_db()
        assert tee.price == Decimal("25.00")
        assert tee.stock_quantity == 7
        assert tee.is_featured is True
        assert tee.status == ProductStatus.ACTIVE
        assert tee.slug == "crew-tee"
        assert len(tee.image_urls) == 2

    def test_rename_reallocates_slug(self, service, category, tee):
        ProductFactory(category=category, slug="oxford-shirt")

        result = service.update_product(str(tee.id), {"name": "Oxford Shirt"})

        assert result.value.slug == "oxford-shirt-2"

    def test_rename_to_same_base_keeps_own_slug(self, service, tee):
        result = service.update_product(str(tee.id), {"name": "CREW TEE"})

        assert result.value.name == "CREW TEE"
        assert result.value.slug == "crew-tee"

    def test_new_images_follow_kept_urls(self, service, storage, tee):
        data = form({"image_urls": ["https://cdn.example.com/back.jpg"]})

        result = service.update_product(str(tee.id), data, [image("new.jpg")], multipart=True)

        urls = result.value.image_urls
        assert urls[0] == "https://cdn.example.com/back.jpg"
        assert len(urls) == 2
        assert storage.keys() == [urls[1].split("/product-images/")[1]]
        assert storage.keys()[0].startswith(f"products/{tee.id}/")

    def test_images_are_kept_when_list_not_sent(self, service, tee):
        result = service.update_product(str(tee.id), form({"name": "Crew Tee"}), [image("new.jpg")], multipart=True)

        urls = result.value.image_urls
        assert urls[:2] == ["https://cdn.example.com/front.jpg", "https://cdn.example.com/back.jpg"]
        assert len(urls) == 3

    def test_dropped_images_are_removed_from_storage(self, service, storage, tee):
        old = storage.upload(BytesIO(b"img"), f"products/{tee.id}/old.jpg", "image/jpeg")
        tee.image_urls = [old.url, "https://cdn.example.com/front.jpg"]
        tee.save()

        result = service.update_product(str(tee.id), {"image_urls": ["https://cdn.example.com/front.jpg"]})

        assert result.value.image_urls == ["https://cdn.example.com/front.jpg"]
        assert not storage.exists(f"products/{tee.id}/old.jpg")

    def test_category_change_resolves_within_new_gender(self, service, tee):
        kids_tees = CategoryFactory(slug="t-shirts", gender=Gender.KIDS)

        result = service.update_product(str(tee.id), {"gender": "kids", "category_id": "t-shirts"})

        assert result.ok
        tee.refresh_from_db()
        assert tee.category_id == kids_tees.id
        assert tee.gender == Gender.KIDS

    def test_unknown_category_id_is_validation_error(self, service, tee):
        result = service.update_product(str(tee.id), {"category_id": str(uuid.uuid4())})

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details[0]["field"] == "category_id"

    def test_taken_sku_is_validation_error(self, service, category, tee):
        ProductFactory(category=category, sku="MEN-TAKEN")

        result = service.update_product(str(tee.id), {"sku": "MEN-TAKEN"})

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details == [{"field": "sku", "message": "SKU 'MEN-TAKEN' is already in use"}]

    def test_invalid_fields_are_all_reported(self, service, tee):
        result = service.update_product(str(tee.id), {"price": "-1", "gender": "aliens"})

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert {problem["field"] for problem in result.details} == {"price", "gender"}

    def test_empty_update_is_rejected(self, service, tee):
        result = service.update_product(str(tee.id), {})

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details == [{"field": "body", "message": "No fields to update"}]

    def test_missing_product(self, service, category):
        result = service.update_product(str(uuid.uuid4()), {"price": "25.00"})

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND


@pytest.mark.unit
@pytest.mark.django_db
class TestUpdateRollback:
    def test_failed_upload_removes_new_uploads_and_keeps_row(self, tee):
        storage = FlakyStorage(fail_at=1)
        service = ProductIngestionService(store=DjangoCatalogStore(), storage=storage)

        result = service.update_product(
            str(tee.id), form({"name": "Renamed Tee"}), [image("1.jpg"), image("2.jpg")], multipart=True
        )

        assert result.error == ErrorCodes.UPLOAD_ERROR
        assert storage.keys() == []
        tee.refresh_from_db()
        assert tee.name == "Crew Tee"
        assert len(tee.image_urls) == 2

    def test_failed_row_update_removes_new_uploads_only(self, service, storage, tee):
        kept = storage.upload(BytesIO(b"img"), f"products/{tee.id}/kept.jpg", "image/jpeg")
        tee.image_urls = [kept.url]
        tee.save()

        with patch.object(DjangoCatalogStore, "update", side_effect=StoreError("connection lost")):
            result = service.update_product(str(tee.id), form({}), [image("new.jpg")], multipart=True)

        assert result.error == ErrorCodes.STORE_ERROR
        assert storage.keys() == [f"products/{tee.id}/kept.jpg"]

    def test_slug_race_on_update_is_validation_error(self, service, storage, tee):
        with patch.object(DjangoCatalogStore, "update", side_effect=UniqueConstraintViolation("slug", "polo")):
            result = service.update_product(str(tee.id), form({"name": "Polo"}), [image()], multipart=True)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.details == [{"field": "slug", "message": "'polo' is already in use"}]
        assert storage.keys() == []
