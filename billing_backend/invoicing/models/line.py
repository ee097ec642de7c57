# invoicing/models/line.py

"""
PRICED DOCUMENT LINE (ABSTRACT)

Shared by InvoiceItem and CreditNoteItem.

Snapshot fields (written by the pricing service, never recomputed on read):
- entered_qty + uom + factor -> quantity (canonical, 3 dp)
- unit_price_excl_vat, unit_vat, unit_price_incl_vat, line_total (2 dp)

vat_rate:
- NULL  -> line follows the document VAT %
- value -> line keeps its own rate (e.g. 0 for exempt goods)
"""

import uuid
from decimal import Decimal

from django.db import models

from products.models import Product


class UnitOfMeasure(models.TextChoices):
    BOX = "BOX", "Box"
    PCS = "PCS", "Pieces"
    KG = "KG", "Kilogram"
    G = "G", "Gram"
    BAG = "BAG", "Bag"


class PricedLine(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="%(class)s_lines",
        null=True,
        blank=True,
    )
    description = models.CharField(max_length=255, blank=True, default="")

    uom = models.CharField(
        max_length=8, choices=UnitOfMeasure.choices, default=UnitOfMeasure.BOX
    )
    entered_qty = models.DecimalField(max_digits=12, decimal_places=3)
    factor = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal("1.000"),
        help_text="Units per box or kg per bag used for conversion.",
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        help_text="Canonical quantity (entered_qty x factor).",
    )

    unit_price_excl_vat = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    vat_rate = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True
    )
    unit_vat = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    unit_price_incl_vat = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    line_total = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["created_at"]

    @property
    def label(self) -> str:
        if self.description:
            return self.description
        return getattr(self.product, "name", "") or ""
