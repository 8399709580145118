import uuid

from django.core.validators import MinValueValidator
from django.db import models


class Gender(models.TextChoices):
    MENS = "mens", "Mens"
    WOMENS = "womens", "Womens"
    KIDS = "kids", "Kids"


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    DRAFT = "draft", "Draft"
    ARCHIVED = "archived", "Archived"


class Category(models.Model):
    """
    Catalog category.

    Categories may be gender-scoped (``gender`` set) or global (``gender``
    null); the same slug can be reused under different genders.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=120)
    gender = models.CharField(max_length=10, choices=Gender.choices, null=True, blank=True)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        app_label = "catalog"
        verbose_name_plural = "categories"
        constraints = [
            models.UniqueConstraint(fields=["slug", "gender"], name="catalog_category_slug_gender_uniq"),
        ]
        indexes = [
            models.Index(fields=["slug", "gender"], name="catalog_cat_slug_gender_idx"),
        ]

    def __str__(self):
        if self.gender:
            return f"{self.name} ({self.gender})"
        return self.name


class Product(models.Model):
    # Basic Information
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=255, unique=True)
    sku = models.CharField(max_length=64, unique=True)
    description = models.TextField()

    # Classification
    gender = models.CharField(max_length=10, choices=Gender.choices)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="products")
    subcategory = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="subcategory_products"
    )
    brand = models.CharField(max_length=100, blank=True)

    # Pricing and Inventory
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0.01)])
    original_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0.01)]
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=5)

    # Product Attributes
    sizes = models.JSONField(default=list, blank=True)
    colors = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    image_urls = models.JSONField(default=list, blank=True, help_text="Public image URLs in display order")

    # Status and Visibility
    status = models.CharField(max_length=10, choices=ProductStatus.choices, default=ProductStatus.ACTIVE)
    is_featured = models.BooleanField(default=False)
    is_on_sale = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "catalog"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="catalog_prod_status_new_idx"),  # Default listing
            models.Index(fields=["status", "price"], name="catalog_prod_status_price_idx"),
            models.Index(fields=["gender", "status"], name="catalog_prod_gender_idx"),
            models.Index(fields=["category", "status", "-created_at"], name="catalog_prod_category_idx"),
            models.Index(fields=["is_featured", "status"], name="catalog_prod_featured_idx"),
            models.Index(fields=["is_on_sale", "status"], name="catalog_prod_on_sale_idx"),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    def __str__(self):
        return self.name
