# catalog/admin.py

from django.contrib import admin

from catalog.models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ("name", "sku", "price", "stock", "track_quantity")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "store", "is_active", "created_at")
    list_filter = ("is_active", "store")
    search_fields = ("name",)
    inlines = [ProductVariantInline]


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ("name", "product", "sku", "price", "stock", "track_quantity")
    list_filter = ("track_quantity",)
    search_fields = ("name", "sku", "product__name")
