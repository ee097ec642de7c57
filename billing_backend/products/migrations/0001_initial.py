# products/migrations/0001_initial.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(max_length=128, unique=True, db_index=True)),
                ("item_code", models.CharField(max_length=64, blank=True, default="")),
                ("name", models.CharField(max_length=255, db_index=True)),
                (
                    "selling_price",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        null=True,
                        blank=True,
                        help_text="Unit selling price EXCL VAT.",
                    ),
                ),
                ("units_per_box", models.PositiveIntegerField(default=1)),
                (
                    "kg_per_bag",
                    models.DecimalField(
                        max_digits=10, decimal_places=3, default=Decimal("25.000")
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
