import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("slug", models.SlugField(max_length=120)),
                (
                    "gender",
                    models.CharField(
                        blank=True,
                        choices=[("mens", "Mens"), ("womens", "Womens"), ("kids", "Kids")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["slug", "gender"], name="catalog_cat_slug_gender_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("slug", "gender"), name="catalog_category_slug_gender_uniq")
                ],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("description", models.TextField()),
                (
                    "gender",
                    models.CharField(
                        choices=[("mens", "Mens"), ("womens", "Womens"), ("kids", "Kids")], max_length=10
                    ),
                ),
                ("brand", models.CharField(blank=True, max_length=100)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0.01)],
                    ),
                ),
                (
                    "original_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0.01)],
                    ),
                ),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("low_stock_threshold", models.PositiveIntegerField(default=5)),
                ("sizes", models.JSONField(blank=True, default=list)),
                ("colors", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "image_urls",
                    models.JSONField(blank=True, default=list, help_text="Public image URLs in display order"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("draft", "Draft"), ("archived", "Archived")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("is_featured", models.BooleanField(default=False)),
                ("is_on_sale", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to="catalog.category",
                    ),
                ),
                (
                    "subcategory",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="subcategory_products",
                        to="catalog.category",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "-created_at"], name="catalog_prod_status_new_idx"),
                    models.Index(fields=["status", "price"], name="catalog_prod_status_price_idx"),
                    models.Index(fields=["gender", "status"], name="catalog_prod_gender_idx"),
                    models.Index(fields=["category", "status", "-created_at"], name="catalog_prod_category_idx"),
                    models.Index(fields=["is_featured", "status"], name="catalog_prod_featured_idx"),
                    models.Index(fields=["is_on_sale", "status"], name="catalog_prod_on_sale_idx"),
                ],
            },
        ),
    ]
