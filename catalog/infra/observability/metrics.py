"""
Prometheus Metrics

Catalog ingestion metrics, exposed at /api/catalog/metrics/.
"""

from prometheus_client import Counter, Histogram


# Ingestion Metrics
product_ingestions_total = Counter(
    "catalog_product_ingestions_total", "Product create requests by outcome", ["outcome"]
)
"""
Labels: outcome (created, validation_error, upload_error, store_error, deadline_exceeded, internal_error)
"""

product_ingestion_duration = Histogram(
    "catalog_product_ingestion_seconds",
    "Product create duration in seconds",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

product_updates_total = Counter("catalog_product_updates_total", "Product update requests by outcome", ["outcome"])
"""
Labels: outcome (updated, validation_error, product_not_found, upload_error, store_error,
    deadline_exceeded, internal_error)
"""

images_uploaded_total = Counter("catalog_images_uploaded_total", "Product images uploaded to object storage")

# Identifier Metrics
sku_generator_fallbacks_total = Counter(
    "catalog_sku_generator_fallbacks_total", "SKUs synthesized locally because the store generator failed"
)
insert_conflicts_total = Counter("catalog_insert_conflicts_total", "Insert retries after a unique violation", ["field"])

# Compensation Metrics
compensations_total = Counter("catalog_compensations_total", "Write rollbacks by outcome", ["outcome"])
"""
Labels: outcome (clean, storage_incomplete, row_delete_failed)
"""

compensation_storage_failures_total = Counter(
    "catalog_compensation_storage_failures_total", "Stored objects that could not be removed during rollback"
)

# Cleanup Metrics
image_cleanup_failures_total = Counter(
    "catalog_image_cleanup_failures_total", "Replaced or deleted product images that could not be removed"
)
