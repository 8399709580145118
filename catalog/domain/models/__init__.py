from .catalog import Category, Gender, Product, ProductStatus


__all__ = [
    "Category",
    "Gender",
    "Product",
    "ProductStatus",
]
