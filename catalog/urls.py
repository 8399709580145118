from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import CategoryViewSet, ProductViewSet, catalog_prometheus_metrics

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"products", ProductViewSet, basename="product")

app_name = "catalog"

urlpatterns = [
    path("", include(router.urls)),
    # Prometheus metrics endpoint
    path("metrics/", catalog_prometheus_metrics, name="catalog-metrics"),
]
