# invoicing/services/units.py

"""
UNIT CONVERSION

Turns what the clerk typed (2 BAG, 3 BOX, 1.5 KG) into the canonical
quantity stored on the line and used for pricing.

RULES:
- BOX: entered x units_per_box (integer, >= 1; line override wins when >= 1)
- BAG: entered x kg_per_bag (line override > product default > DEFAULT_KG_PER_BAG,
  floored at 0.001)
- PCS / KG / G: entered verbatim
- Canonical quantity is rounded to 3 dp
- Unknown / blank unit tags are treated as BOX
- entered quantity <= 0 is rejected, never clamped
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal

from django.conf import settings

from invoicing.models.line import UnitOfMeasure
from invoicing.services.exceptions import InvalidQuantity
from invoicing.services.money import round3, to_decimal

MIN_KG_PER_BAG = Decimal("0.001")


@dataclass(frozen=True)
class ConvertedQuantity:
    uom: str
    entered_qty: Decimal
    factor: Decimal
    quantity: Decimal


def normalize_uom(value) -> str:
    tag = str(value or "").strip().upper()
    if tag in UnitOfMeasure.values:
        return tag
    return UnitOfMeasure.BOX.value


def default_kg_per_bag() -> Decimal:
    return to_decimal(getattr(settings, "DEFAULT_KG_PER_BAG", "25.000")) or Decimal("25.000")


def box_factor(*, override=None, product_units_per_box=None) -> Decimal:
    o = to_decimal(override)
    raw = o if o >= 1 else to_decimal(product_units_per_box)
    n = raw.to_integral_value(rounding=ROUND_DOWN)
    return n if n >= 1 else Decimal("1")


def bag_factor(*, override=None, product_kg_per_bag=None) -> Decimal:
    o = to_decimal(override)
    if o > 0:
        kg = o
    else:
        p = to_decimal(product_kg_per_bag)
        kg = p if p > 0 else default_kg_per_bag()
    return round3(max(kg, MIN_KG_PER_BAG))


def convert_quantity(
    *,
    uom,
    entered_qty,
    override_factor=None,
    product_units_per_box=None,
    product_kg_per_bag=None,
) -> ConvertedQuantity:
    tag = normalize_uom(uom)
    qty = to_decimal(entered_qty)

    if qty <= 0:
        raise InvalidQuantity(f"Quantity must be greater than zero (got {entered_qty!r})")

    if tag == UnitOfMeasure.BOX:
        factor = box_factor(override=override_factor, product_units_per_box=product_units_per_box)
    elif tag == UnitOfMeasure.BAG:
        factor = bag_factor(override=override_factor, product_kg_per_bag=product_kg_per_bag)
    else:
        factor = Decimal("1")

    return ConvertedQuantity(
        uom=tag,
        entered_qty=round3(qty),
        factor=round3(factor),
        quantity=round3(qty * factor),
    )


def convert_for_product(*, product, uom, entered_qty, override_factor=None) -> ConvertedQuantity:
    """Convert using the product's units_per_box / kg_per_bag defaults."""
    return convert_quantity(
        uom=uom,
        entered_qty=entered_qty,
        override_factor=override_factor,
        product_units_per_box=getattr(product, "units_per_box", None),
        product_kg_per_bag=getattr(product, "kg_per_bag", None),
    )
