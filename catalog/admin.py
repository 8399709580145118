from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "gender", "created_at")
    list_filter = ("gender",)
    search_fields = ("name", "slug", "description")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "gender", "category", "price", "stock_quantity", "status", "is_featured", "created_at")
    list_filter = ("status", "gender", "is_featured", "is_on_sale", "category")
    search_fields = ("name", "description", "sku", "slug")
    readonly_fields = ("id", "slug", "sku", "image_urls", "created_at", "updated_at")

    fieldsets = (
        ("Basic Information", {"fields": ("id", "name", "slug", "sku", "description")}),
        ("Classification", {"fields": ("gender", "category", "subcategory", "brand", "tags")}),
        ("Pricing & Inventory", {"fields": ("price", "original_price", "stock_quantity", "low_stock_threshold")}),
        ("Variants & Media", {"fields": ("sizes", "colors", "image_urls")}),
        ("Status & Visibility", {"fields": ("status", "is_featured", "is_on_sale")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
