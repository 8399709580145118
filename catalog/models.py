from catalog.domain.models import Category, Gender, Product, ProductStatus


__all__ = [
    "Category",
    "Gender",
    "Product",
    "ProductStatus",
]
