# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Canonical Product serializer for staff CRUD.
- selling_price is EXCL VAT; VAT is applied on invoice lines.
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "item_code",
            "name",
            "selling_price",
            "units_per_box",
            "kg_per_bag",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_selling_price(self, value):
        # NULL allowed (catalogue-only); negative never
        if value is not None and value < 0:
            raise serializers.ValidationError("Selling price must be non-negative")
        return value

    def validate_units_per_box(self, value):
        if value is None or int(value) < 1:
            raise serializers.ValidationError("units_per_box must be at least 1")
        return value

    def validate_kg_per_bag(self, value):
        if value is None or value < Decimal("0.001"):
            raise serializers.ValidationError("kg_per_bag must be at least 0.001")
        return value
