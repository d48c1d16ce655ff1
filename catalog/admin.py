"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Product, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "sku", "stock", "is_active", "updated_at")
    search_fields = ("title", "sku")
    list_filter = ("is_active",)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "movement_type", "quantity", "reason", "reference", "created_at")
    list_filter = ("movement_type",)
    search_fields = ("product__sku", "reference")


# EOF
