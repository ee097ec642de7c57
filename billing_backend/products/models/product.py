# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    PRICING MODEL (IMPORTANT):
    - selling_price is EXCL VAT
    - VAT is applied per invoice line (line rate or document rate)
    - selling_price may be NULL for catalogue-only products; pricing such a
      product without an explicit line price is rejected (MissingPrice)

    CONVERSION DEFAULTS:
    - units_per_box: pieces in one BOX (integer >= 1)
    - kg_per_bag: kilograms in one BAG (>= 0.001)
    Lines may override either factor.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    item_code = models.CharField(max_length=64, blank=True, default="")
    name = models.CharField(max_length=255, db_index=True)

    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Unit selling price EXCL VAT.",
    )

    units_per_box = models.PositiveIntegerField(default=1)

    kg_per_bag = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal("25.000"),
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.selling_price is not None and Decimal(self.selling_price) < 0:
            raise ValidationError("Selling price cannot be negative")

        if not self.units_per_box or int(self.units_per_box) < 1:
            raise ValidationError("units_per_box must be at least 1")

        if self.kg_per_bag is None or Decimal(self.kg_per_bag) < Decimal("0.001"):
            raise ValidationError("kg_per_bag must be at least 0.001")
