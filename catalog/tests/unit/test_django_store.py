import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from catalog.domain.exceptions import StoreError, UniqueConstraintViolation
from catalog.domain.models import Gender, Product, ProductStatus
from catalog.infra.store import DjangoCatalogStore, ProductQuery
from catalog.tests.factories import CategoryFactory, ProductFactory


@pytest.fixture
def store():
    return DjangoCatalogStore()


@pytest.fixture
def category(db):
    return CategoryFactory(slug="t-shirts", gender=Gender.MENS)


def row(category, **overrides):
    values = {
        "name": "Classic Tee",
        "description": "Cotton",
        "price": Decimal("19.99"),
        "gender": Gender.MENS,
        "category_id": str(category.id),
        "slug": "classic-tee",
        "sku": "MEN-000001",
        "status": ProductStatus.ACTIVE,
        "brand": "MHCloth",
        "sizes": ["M"],
        "colors": [],
        "tags": [],
        "image_urls": [],
    }
    values.update(overrides)
    return values


@pytest.mark.unit
@pytest.mark.django_db
class TestWrites:
    def test_insert_returns_stored_row(self, store, category):
        product = store.insert(row(category))

        assert product.id is not None
        assert Product.objects.get(id=product.id).slug == "classic-tee"

    def test_duplicate_slug_is_a_unique_violation(self, store, category):
        store.insert(row(category))

        with pytest.raises(UniqueConstraintViolation) as excinfo:
            store.insert(row(category, sku="MEN-000002"))

        assert excinfo.value.field == "slug"
        assert excinfo.value.value == "classic-tee"

    def test_duplicate_sku_is_a_unique_violation(self, store, category):
        store.insert(row(category))

        with pytest.raises(UniqueConstraintViolation) as excinfo:
            store.insert(row(category, slug="classic-tee-2"))

        assert excinfo.value.field == "sku"

    def test_update_sets_columns(self, store, category):
        product = store.insert(row(category, status=ProductStatus.DRAFT))

        updated = store.update(str(product.id), {"image_urls": ["a", "b"], "status": ProductStatus.ACTIVE})

        assert updated.image_urls == ["a", "b"]
        assert Product.objects.get(id=product.id).status == ProductStatus.ACTIVE

    def test_update_collision_is_a_unique_violation(self, store, category):
        store.insert(row(category))
        other = store.insert(row(category, slug="oxford-shirt", sku="MEN-000002"))

        with pytest.raises(UniqueConstraintViolation) as excinfo:
            store.update(str(other.id), {"sku": "MEN-000001"})

        assert excinfo.value.field == "sku"

    def test_slug_exists_can_ignore_one_product(self, store, category):
        product = store.insert(row(category))

        assert store.slug_exists("classic-tee") is True
        assert store.slug_exists("classic-tee", exclude_id=str(product.id)) is False

    def test_update_of_missing_row_fails(self, store):
        with pytest.raises(StoreError):
            store.update(str(uuid.uuid4()), {"image_urls": []})

    def test_delete(self, store, category):
        product = store.insert(row(category))

        assert store.delete(str(product.id)) is True
        assert store.delete(str(product.id)) is False

    def test_database_failure_becomes_store_error(self, store):
        with patch.object(Product.objects, "filter", side_effect=DatabaseError("gone")):
            with pytest.raises(StoreError):
                store.slug_exists("anything")


@pytest.mark.unit
@pytest.mark.django_db
class TestBulkWrites:
    def test_get_many_skips_unknown_and_malformed_ids(self, store, category):
        product = ProductFactory(category=category)

        found = store.get_many([str(product.id), str(uuid.uuid4()), "not-a-uuid"])

        assert found == [product]

    def test_delete_many(self, store, category):
        first, second, kept = ProductFactory.create_batch(3, category=category)

        assert store.delete_many([str(first.id), str(second.id), "not-a-uuid"]) == 2
        assert list(Product.objects.all()) == [kept]

    def test_update_many_returns_updated_ids(self, store, category):
        first, second = ProductFactory.create_batch(2, category=category)

        updated = store.update_many([str(first.id), str(uuid.uuid4())], {"status": ProductStatus.ARCHIVED})

        assert updated == [str(first.id)]
        assert Product.objects.get(id=first.id).status == ProductStatus.ARCHIVED
        assert Product.objects.get(id=second.id).status == ProductStatus.ACTIVE

    def test_update_many_touches_updated_at(self, store, category):
        product = ProductFactory(category=category)
        yesterday = timezone.now() - timedelta(days=1)
        Product.objects.filter(id=product.id).update(updated_at=yesterday)

        store.update_many([str(product.id)], {"is_featured": True})

        assert Product.objects.get(id=product.id).updated_at > yesterday


@pytest.mark.unit
@pytest.mark.django_db
class TestQuery:
    def test_filters_sort_and_count(self, store, category):
        cheap = ProductFactory(category=category, price=Decimal("10.00"), name="Cheap Tee")
        pricey = ProductFactory(category=category, price=Decimal("90.00"), name="Pricey Tee")
        ProductFactory(category=category, status=ProductStatus.DRAFT)
        ProductFactory(gender=Gender.KIDS, category=CategoryFactory(gender=Gender.KIDS))

        products, count = store.query(
            ProductQuery(gender=Gender.MENS, category_id=str(category.id), sort="price_desc")
        )

        assert count == 2
        assert products == [pricey, cheap]

    def test_status_all_disables_filter(self, store, category):
        ProductFactory(category=category)
        ProductFactory(category=category, status=ProductStatus.ARCHIVED)

        _, count = store.query(ProductQuery(status="all"))

        assert count == 2

    def test_search_matches_name_or_description(self, store, category):
        ProductFactory(category=category, name="Linen Shirt")
        ProductFactory(category=category, name="Tee", description="Soft LINEN blend")
        ProductFactory(category=category, name="Hoodie", description="Fleece")

        _, count = store.query(ProductQuery(search="linen"))

        assert count == 2

    def test_pagination_keeps_total_count(self, store, category):
        ProductFactory.create_batch(5, category=category)

        products, count = store.query(ProductQuery(limit=2, offset=4))

        assert count == 5
        assert len(products) == 1

    def test_flags(self, store, category):
        ProductFactory(category=category, is_featured=True)
        ProductFactory(category=category, is_on_sale=True)

        assert store.query(ProductQuery(is_featured=True))[1] == 1
        assert store.query(ProductQuery(is_on_sale=True))[1] == 1

    def test_malformed_category_id_matches_nothing(self, store, category):
        ProductFactory(category=category)

        assert store.query(ProductQuery(category_id="not-a-uuid")) == ([], 0)


@pytest.mark.unit
@pytest.mark.django_db
class TestLookups:
    def test_get_by_id_or_slug(self, store, category):
        product = ProductFactory(category=category, slug="crew-tee")

        assert store.get(product_id=str(product.id)) == product
        assert store.get(slug="crew-tee") == product
        assert store.get(product_id="not-a-uuid") is None
        assert store.get(slug="missing") is None

    def test_generate_sku_after_existing_prefixed_count(self, store, category):
        ProductFactory(category=category, sku="MEN-000001")
        ProductFactory(category=category, sku="MEN-000002")

        assert store.generate_unique_sku("MEN") == "MEN-000003"

    def test_generate_sku_from_base(self, store, category):
        ProductFactory(category=category, sku="TEE-RED")
        ProductFactory(category=category, sku="TEE-RED-1")

        assert store.generate_unique_sku("MEN", "TEE-RED") == "TEE-RED-2"

    def test_find_category_scoped_by_gender(self, store, category):
        kids = CategoryFactory(slug="t-shirts", gender=Gender.KIDS)

        assert store.find_category("t-shirts", Gender.KIDS) == kids
        assert store.find_category("t-shirts", Gender.WOMENS) is None

    def test_list_categories_by_gender(self, store, category):
        CategoryFactory(gender=Gender.KIDS)

        assert store.list_categories(Gender.MENS) == [category]
        assert len(store.list_categories()) == 2
