from .category_views import CategoryViewSet
from .product_views import ProductViewSet
from .prometheus_metrics import catalog_prometheus_metrics


__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "catalog_prometheus_metrics",
]
