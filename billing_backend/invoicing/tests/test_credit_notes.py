# invoicing/tests/test_credit_notes.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from customers.models import Customer
from invoicing.models import CreditNote, Invoice
from invoicing.services import credit_note_service, invoice_service, payment_service
from invoicing.services.exceptions import CreditNoteError


def _line(price, qty=1):
    return {"description": "Returned item", "uom": "PCS", "qty": qty, "unit_price": price}


class CreditNoteServiceTests(TestCase):
    """
    GUARANTEES:
    - ISSUED / REFUNDED credit notes reduce the linked invoice balance
    - PENDING / VOID credit notes do not
    - Invoice status never moves backwards
    """

    def setUp(self):
        self.customer = Customer.objects.create(name="Corner Shop")
        self.other = Customer.objects.create(name="Other Shop")

        # 100 + 15% = 115.00
        self.invoice = invoice_service.create_invoice(
            customer=self.customer, lines=[_line("100")], vat_percent=Decimal("15")
        )
        invoice_service.issue_invoice(invoice_id=self.invoice.id)

    def _reload(self) -> Invoice:
        return Invoice.objects.get(id=self.invoice.id)

    def _credit(self, price="20", **kwargs):
        return credit_note_service.create_credit_note(
            customer=kwargs.pop("customer", self.customer),
            lines=kwargs.pop("lines", [_line(price)]),
            invoice_id=kwargs.pop("invoice_id", self.invoice.id),
            **kwargs,
        )

    def test_credit_note_reduces_invoice_balance(self):
        credit_note = self._credit("20", reason="Damaged")

        self.assertTrue(credit_note.credit_note_number.startswith("CN"))
        # takes the invoice VAT %
        self.assertEqual(credit_note.vat_percent, Decimal("15.00"))
        self.assertEqual(credit_note.total_amount, Decimal("23.00"))

        invoice = self._reload()
        self.assertEqual(invoice.credits_applied, Decimal("23.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("92.00"))
        self.assertEqual(invoice.status, Invoice.STATUS_PARTIALLY_PAID)

    def test_full_credit_settles_invoice(self):
        self._credit("100")
        invoice = self._reload()

        self.assertEqual(invoice.balance_remaining, Decimal("0.00"))
        self.assertEqual(invoice.status, Invoice.STATUS_PAID)

    def test_pending_credit_note_is_not_applied(self):
        self._credit("20", status=CreditNote.STATUS_PENDING)
        self.assertEqual(self._reload().credits_applied, Decimal("0.00"))

    def test_void_removes_credit_without_regressing_status(self):
        credit_note = self._credit("20")

        credit_note_service.void_credit_note(credit_note_id=credit_note.id)
        invoice = self._reload()

        self.assertEqual(invoice.credits_applied, Decimal("0.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("115.00"))
        self.assertEqual(invoice.status, Invoice.STATUS_PARTIALLY_PAID)

    def test_void_that_would_reopen_paid_invoice_is_refused(self):
        credit_note = self._credit("100")

        with self.assertRaises(CreditNoteError):
            credit_note_service.void_credit_note(credit_note_id=credit_note.id)

        credit_note.refresh_from_db()
        self.assertEqual(credit_note.status, CreditNote.STATUS_ISSUED)
        self.assertEqual(self._reload().status, Invoice.STATUS_PAID)

    def test_void_allowed_when_payments_still_cover_invoice(self):
        credit_note = self._credit("20")
        payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("115"))

        credit_note_service.void_credit_note(credit_note_id=credit_note.id)
        invoice = self._reload()

        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertEqual(invoice.credits_applied, Decimal("0.00"))

    def test_refund_keeps_credit_applied(self):
        credit_note = self._credit("20")

        credit_note_service.refund_credit_note(credit_note_id=credit_note.id)

        credit_note.refresh_from_db()
        self.assertEqual(credit_note.status, CreditNote.STATUS_REFUNDED)
        self.assertEqual(self._reload().credits_applied, Decimal("23.00"))

    def test_restore_after_void(self):
        credit_note = self._credit("20")
        credit_note_service.void_credit_note(credit_note_id=credit_note.id)

        credit_note_service.restore_credit_note(credit_note_id=credit_note.id)

        self.assertEqual(self._reload().credits_applied, Decimal("23.00"))

    def test_pending_cannot_be_refunded(self):
        credit_note = self._credit("20", status=CreditNote.STATUS_PENDING)
        with self.assertRaises(CreditNoteError):
            credit_note_service.refund_credit_note(credit_note_id=credit_note.id)

    def test_unlinked_credit_note(self):
        credit_note = self._credit("10", invoice_id=None, vat_percent=Decimal("0"))

        self.assertIsNone(credit_note.invoice)
        self.assertEqual(credit_note.total_amount, Decimal("10.00"))

    # =====================================================
    # REFUSALS
    # =====================================================

    def test_invoice_of_another_customer(self):
        with self.assertRaises(CreditNoteError):
            self._credit("10", customer=self.other)

    def test_draft_invoice_cannot_be_credited(self):
        draft = invoice_service.create_invoice(customer=self.customer, lines=[_line("10")])
        with self.assertRaises(CreditNoteError):
            self._credit("10", invoice_id=draft.id)

    def test_refunded_is_not_a_creation_status(self):
        with self.assertRaises(CreditNoteError):
            self._credit("10", status=CreditNote.STATUS_REFUNDED)

    def test_credit_note_needs_lines(self):
        with self.assertRaises(CreditNoteError):
            self._credit(lines=[])

        self.assertEqual(CreditNote.objects.count(), 0)
