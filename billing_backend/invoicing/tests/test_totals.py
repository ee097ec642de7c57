# invoicing/tests/test_totals.py

from decimal import Decimal

from django.test import SimpleTestCase

from invoicing.models import Invoice
from invoicing.services.exceptions import InvalidInvoiceStateError
from invoicing.services.lifecycle import settled_status, validate_transition
from invoicing.services.money import round2
from invoicing.services.totals import (
    LineAmounts,
    RecomputeMode,
    base_totals,
    compute_totals,
    proportional_discount_totals,
)


def mixed_lines():
    return [
        LineAmounts(quantity=Decimal("1"), unit_price_excl_vat=Decimal("100"), vat_rate=Decimal("15")),
        LineAmounts(quantity=Decimal("1"), unit_price_excl_vat=Decimal("50"), vat_rate=Decimal("0")),
    ]


class TotalsTests(SimpleTestCase):
    """
    GUARANTEES:
    - total = subtotal + vat, gross = total + previous balance
    - balance never goes negative
    - proportional discount scales line bases, then VAT per line
    """

    def test_base_recompute_buckets_by_rate(self):
        t = base_totals(mixed_lines(), vat_percent=15)

        self.assertEqual(t.subtotal, Decimal("150.00"))
        self.assertEqual(t.vat_amount, Decimal("15.00"))
        self.assertEqual(t.total_amount, Decimal("165.00"))
        self.assertEqual(t.discount_amount, Decimal("0.00"))

    def test_proportional_discount(self):
        t = proportional_discount_totals(mixed_lines(), discount_percent=10, vat_percent=15)

        self.assertEqual(t.subtotal, Decimal("135.00"))
        self.assertEqual(t.vat_amount, Decimal("13.50"))
        self.assertEqual(t.total_amount, Decimal("148.50"))
        self.assertEqual(t.discount_amount, Decimal("15.00"))
        self.assertEqual(t.discount_percent, Decimal("10.00"))

    def test_zero_discount_equals_base_recompute(self):
        self.assertEqual(
            proportional_discount_totals(mixed_lines(), discount_percent=0, vat_percent=15),
            base_totals(mixed_lines(), vat_percent=15),
        )

    def test_discount_is_clamped_to_hundred(self):
        t = proportional_discount_totals(mixed_lines(), discount_percent=150)

        self.assertEqual(t.discount_percent, Decimal("100.00"))
        self.assertEqual(t.subtotal, Decimal("0.00"))
        self.assertEqual(t.total_amount, Decimal("0.00"))

    def test_vat_is_rounded_once_per_bucket(self):
        lines = [
            LineAmounts(quantity=Decimal("1"), unit_price_excl_vat=Decimal("0.10"))
            for _ in range(3)
        ]
        t = base_totals(lines, vat_percent=15)

        # 0.30 x 15% = 0.045, not 3 x round(0.015)
        self.assertEqual(t.vat_amount, Decimal("0.05"))

    def test_gross_and_balance(self):
        lines = [LineAmounts(quantity=1, unit_price_excl_vat=Decimal("1000"), vat_rate=0)]
        t = compute_totals(
            lines,
            mode=RecomputeMode.BASE_RECOMPUTE,
            previous_balance=200,
            amount_paid=500,
            credits_applied=100,
        )

        self.assertEqual(t.total_amount, Decimal("1000.00"))
        self.assertEqual(t.gross_total, Decimal("1200.00"))
        self.assertEqual(t.balance_remaining, Decimal("600.00"))

    def test_overpayment_leaves_zero_balance(self):
        lines = [LineAmounts(quantity=1, unit_price_excl_vat=Decimal("100"), vat_rate=0)]
        t = compute_totals(lines, mode="BASE_RECOMPUTE", amount_paid=250)
        self.assertEqual(t.balance_remaining, Decimal("0.00"))

    def test_mode_accepts_plain_string(self):
        t = compute_totals(
            mixed_lines(), mode="PROPORTIONAL_DISCOUNT", discount_percent=10, vat_percent=15
        )
        self.assertEqual(t.total_amount, Decimal("148.50"))

    def test_input_list_is_left_as_given(self):
        lines = mixed_lines()

        compute_totals(lines, mode=RecomputeMode.PROPORTIONAL_DISCOUNT, discount_percent=10)

        self.assertEqual(lines, mixed_lines())

    def test_discount_rounds_each_line_base(self):
        """
        Business rule:
        Each line's discounted base is rounded on its own before summing.
        0.05 at 10% off -> 0.045 -> 0.05 per line, so three lines give 0.15
        (rounding the discounted sum 0.135 would give 0.14).
        """
        lines = [
            LineAmounts(quantity=Decimal("1"), unit_price_excl_vat=Decimal("0.05"), vat_rate=None)
            for _ in range(3)
        ]

        t = proportional_discount_totals(lines, discount_percent=10, vat_percent=15)

        self.assertEqual(t.subtotal, Decimal("0.15"))
        self.assertEqual(t.vat_amount, Decimal("0.02"))
        self.assertEqual(t.total_amount, Decimal("0.17"))
        self.assertEqual(t.discount_amount, Decimal("0.02"))
        self.assertNotEqual(t.subtotal, round2(Decimal("0.15") * Decimal("0.9")))

    def test_generator_input(self):
        t = base_totals((line for line in mixed_lines()), vat_percent=15)
        self.assertEqual(t.subtotal, Decimal("150.00"))


class MoneyRoundingTests(SimpleTestCase):
    def test_round2_is_half_up_and_idempotent(self):
        self.assertEqual(round2(Decimal("2.675")), Decimal("2.68"))
        self.assertEqual(round2(Decimal("-2.675")), Decimal("-2.68"))
        self.assertEqual(round2(round2("7.125")), round2("7.125"))

    def test_round2_never_raises(self):
        self.assertEqual(round2(None), Decimal("0.00"))
        self.assertEqual(round2("abc"), Decimal("0.00"))
        self.assertEqual(round2(0.1), Decimal("0.10"))


class InvoiceLifecycleRuleTests(SimpleTestCase):
    def test_void_is_terminal(self):
        invoice = Invoice(invoice_number="INV-1", status=Invoice.STATUS_VOID)
        with self.assertRaises(InvalidInvoiceStateError):
            validate_transition(invoice=invoice, target_status=Invoice.STATUS_ISSUED)

    def test_draft_cannot_jump_to_paid(self):
        invoice = Invoice(invoice_number="INV-1", status=Invoice.STATUS_DRAFT)
        with self.assertRaises(InvalidInvoiceStateError):
            validate_transition(invoice=invoice, target_status=Invoice.STATUS_PAID)

    def test_settled_status_follows_money(self):
        self.assertEqual(
            settled_status(
                current=Invoice.STATUS_ISSUED, gross_total=100, amount_paid=40, credits_applied=0
            ),
            Invoice.STATUS_PARTIALLY_PAID,
        )
        self.assertEqual(
            settled_status(
                current=Invoice.STATUS_ISSUED, gross_total=100, amount_paid=60, credits_applied=40
            ),
            Invoice.STATUS_PAID,
        )

    def test_settled_status_never_moves_backwards(self):
        self.assertEqual(
            settled_status(
                current=Invoice.STATUS_PAID, gross_total=100, amount_paid=10, credits_applied=0
            ),
            Invoice.STATUS_PAID,
        )

    def test_draft_is_not_settled(self):
        self.assertEqual(
            settled_status(
                current=Invoice.STATUS_DRAFT, gross_total=100, amount_paid=100, credits_applied=0
            ),
            Invoice.STATUS_DRAFT,
        )
