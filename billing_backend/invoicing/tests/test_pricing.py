# invoicing/tests/test_pricing.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from invoicing.services.exceptions import InvalidVatRate, MissingPrice, MissingProduct
from invoicing.services.pricing import effective_vat_rate, price_line, resolve_unit_price


class LinePricingTests(SimpleTestCase):
    """
    GUARANTEES:
    - Prices are EXCL VAT; VAT is rounded per unit, then multiplied
    - A line without its own rate takes the document rate
    - Missing product / price and negative rates are errors
    """

    def test_standard_rate_line(self):
        p = price_line(quantity=2, unit_price_excl_vat="100", vat_rate=15)

        self.assertEqual(p.unit_vat, Decimal("15.00"))
        self.assertEqual(p.unit_price_incl_vat, Decimal("115.00"))
        self.assertEqual(p.line_total, Decimal("230.00"))

    def test_zero_rate_line_has_no_vat(self):
        p = price_line(quantity=3, unit_price_excl_vat="12.50", vat_rate=0)

        self.assertEqual(p.unit_vat, Decimal("0.00"))
        self.assertEqual(p.unit_price_incl_vat, Decimal("12.50"))
        self.assertEqual(p.line_total, Decimal("37.50"))

    def test_half_up_rounding_at_each_step(self):
        p = price_line(quantity=3, unit_price_excl_vat="10.005", vat_rate=15)

        self.assertEqual(p.unit_price_excl_vat, Decimal("10.01"))
        self.assertEqual(p.unit_vat, Decimal("1.50"))
        self.assertEqual(p.unit_price_incl_vat, Decimal("11.51"))
        self.assertEqual(p.line_total, Decimal("34.53"))

    def test_negative_rate_is_rejected(self):
        with self.assertRaises(InvalidVatRate):
            price_line(quantity=1, unit_price_excl_vat=10, vat_rate=-1)

    def test_line_rate_overrides_document_rate(self):
        self.assertEqual(effective_vat_rate(line_rate=None, document_rate=15), Decimal("15"))
        self.assertEqual(effective_vat_rate(line_rate=0, document_rate=15), Decimal("0"))

    def test_explicit_price_wins_over_product(self):
        product = SimpleNamespace(sku="OIL-2L", selling_price=Decimal("80.00"))
        self.assertEqual(
            resolve_unit_price(product=product, override_price="75.555"), Decimal("75.56")
        )
        self.assertEqual(resolve_unit_price(product=product), Decimal("80.00"))

    def test_line_without_product_or_price(self):
        with self.assertRaises(MissingProduct):
            resolve_unit_price(product=None)

    def test_product_without_selling_price(self):
        product = SimpleNamespace(sku="CAT-ONLY", selling_price=None)
        with self.assertRaises(MissingPrice):
            resolve_unit_price(product=product)

    def test_negative_explicit_price(self):
        with self.assertRaises(MissingPrice):
            resolve_unit_price(product=None, override_price="-1")
