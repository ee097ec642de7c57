# invoicing/services/pricing.py

"""
LINE PRICING

Selling prices are EXCL VAT. For one line:

    unit_excl  = round2(price)
    unit_vat   = round2(unit_excl x rate / 100)     (0 when rate is 0)
    unit_incl  = round2(unit_excl + unit_vat)
    line_total = round2(quantity x unit_incl)

The VAT rate belongs to the line. A line without its own rate takes the
document VAT % at pricing time; a line with a rate (0 for exempt goods)
keeps it, so one document may mix rates.
"""

from dataclasses import dataclass
from decimal import Decimal

from invoicing.services.exceptions import InvalidVatRate, MissingPrice, MissingProduct
from invoicing.services.money import HUNDRED, ZERO, round2, to_decimal


@dataclass(frozen=True)
class LinePrice:
    unit_price_excl_vat: Decimal
    vat_rate: Decimal
    unit_vat: Decimal
    unit_price_incl_vat: Decimal
    line_total: Decimal


def validate_vat_rate(rate) -> Decimal:
    r = to_decimal(rate)
    if r < 0:
        raise InvalidVatRate(f"VAT rate cannot be negative (got {rate})")
    return r


def effective_vat_rate(*, line_rate, document_rate) -> Decimal:
    if line_rate is None or line_rate == "":
        return validate_vat_rate(document_rate)
    return validate_vat_rate(line_rate)


def resolve_unit_price(*, product, override_price=None) -> Decimal:
    """
    Explicit price wins, otherwise the product's selling price.
    """
    if override_price is not None and override_price != "":
        price = to_decimal(override_price)
        if price < 0:
            raise MissingPrice(f"Unit price cannot be negative (got {override_price})")
        return round2(price)

    if product is None:
        raise MissingProduct("Line has no product and no explicit unit price")

    if product.selling_price is None:
        raise MissingPrice(f"Product {product.sku} has no selling price")

    return round2(product.selling_price)


def price_line(*, quantity, unit_price_excl_vat, vat_rate) -> LinePrice:
    rate = validate_vat_rate(vat_rate)

    unit_excl = round2(unit_price_excl_vat)
    unit_vat = round2(unit_excl * rate / HUNDRED) if rate > 0 else ZERO
    unit_incl = round2(unit_excl + unit_vat)

    return LinePrice(
        unit_price_excl_vat=unit_excl,
        vat_rate=round2(rate),
        unit_vat=unit_vat,
        unit_price_incl_vat=unit_incl,
        line_total=round2(to_decimal(quantity) * unit_incl),
    )
