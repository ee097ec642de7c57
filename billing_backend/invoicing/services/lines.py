# invoicing/services/lines.py

"""
DOCUMENT LINE BUILDER

Turns a line request into the snapshot fields of a PricedLine
(InvoiceItem / CreditNoteItem):

    {product | product_id, description, uom, qty, factor, unit_price, vat_rate}

product_id that does not resolve -> MissingProduct.
"""

from products.models import Product

from invoicing.services.exceptions import MissingProduct
from invoicing.services.pricing import effective_vat_rate, price_line, resolve_unit_price
from invoicing.services.units import convert_for_product


def resolve_product(line: dict):
    product = line.get("product")
    if product is not None:
        return product

    product_id = line.get("product_id")
    if not product_id:
        return None

    product = Product.objects.filter(id=product_id).first()
    if product is None:
        raise MissingProduct(f"Product not found: {product_id}")
    return product


def build_line_fields(line: dict, *, vat_percent) -> dict:
    product = resolve_product(line)

    converted = convert_for_product(
        product=product,
        uom=line.get("uom"),
        entered_qty=line.get("qty"),
        override_factor=line.get("factor"),
    )

    own_rate = line.get("vat_rate")
    unit_price = resolve_unit_price(product=product, override_price=line.get("unit_price"))

    priced = price_line(
        quantity=converted.quantity,
        unit_price_excl_vat=unit_price,
        vat_rate=effective_vat_rate(line_rate=own_rate, document_rate=vat_percent),
    )

    return {
        "product": product,
        "description": (line.get("description") or "").strip(),
        "uom": converted.uom,
        "entered_qty": converted.entered_qty,
        "factor": converted.factor,
        "quantity": converted.quantity,
        "unit_price_excl_vat": priced.unit_price_excl_vat,
        # NULL keeps the line following the document VAT %
        "vat_rate": None if own_rate is None or own_rate == "" else priced.vat_rate,
        "unit_vat": priced.unit_vat,
        "unit_price_incl_vat": priced.unit_price_incl_vat,
        "line_total": priced.line_total,
    }


def reprice_fields(item, *, vat_percent) -> dict:
    """Price fields of an existing line under a (possibly new) document VAT %."""
    priced = price_line(
        quantity=item.quantity,
        unit_price_excl_vat=item.unit_price_excl_vat,
        vat_rate=effective_vat_rate(line_rate=item.vat_rate, document_rate=vat_percent),
    )
    return {
        "unit_vat": priced.unit_vat,
        "unit_price_incl_vat": priced.unit_price_incl_vat,
        "line_total": priced.line_total,
    }
