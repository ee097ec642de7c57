# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "selling_price",
        "units_per_box",
        "kg_per_bag",
        "is_active",
    )
    search_fields = ("sku", "item_code", "name")
    list_filter = ("is_active",)
