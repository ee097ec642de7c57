# invoicing/tests/test_payments.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from customers.models import Customer
from invoicing.models import Invoice, Payment
from invoicing.services import invoice_service, payment_service
from invoicing.services.exceptions import InvalidInvoiceStateError, PaymentError


class PaymentServiceTests(TestCase):
    """
    GUARANTEES:
    - amount_paid always equals the sum of payment rows
    - status follows paid + credits against the gross total
    - payments only land on ISSUED / PARTIALLY_PAID invoices
    - mark-paid leaves a payment row explaining the PAID status
    """

    def setUp(self):
        self.customer = Customer.objects.create(name="Corner Shop")
        self.invoice = invoice_service.create_invoice(
            customer=self.customer,
            lines=[{"description": "Oil", "uom": "PCS", "qty": 1, "unit_price": "100"}],
            vat_percent=Decimal("15"),
        )
        invoice_service.issue_invoice(invoice_id=self.invoice.id)

    def _reload(self) -> Invoice:
        return Invoice.objects.get(id=self.invoice.id)

    def test_partial_then_full_payment(self):
        payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("50"))
        invoice = self._reload()

        self.assertEqual(invoice.status, Invoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(invoice.amount_paid, Decimal("50.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("65.00"))

        payment_service.record_payment(
            invoice_id=self.invoice.id,
            amount=Decimal("65"),
            payment_date=date(2024, 2, 2),
            method="Bank Transfer",
            reference="TRX-1",
        )
        invoice = self._reload()

        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertEqual(invoice.balance_remaining, Decimal("0.00"))
        self.assertEqual(invoice.payments.count(), 2)

    def test_non_positive_amount_is_rejected(self):
        for amount in (Decimal("0"), Decimal("-10")):
            with self.subTest(amount=amount):
                with self.assertRaises(PaymentError):
                    payment_service.record_payment(invoice_id=self.invoice.id, amount=amount)

        self.assertEqual(Payment.objects.count(), 0)

    def test_model_refuses_zero_amount(self):
        with self.assertRaises(ValidationError):
            Payment.objects.create(invoice=self.invoice, amount=Decimal("0.00"))

    def test_draft_invoice_cannot_be_paid(self):
        draft = invoice_service.create_invoice(
            customer=self.customer,
            lines=[{"description": "Oil", "uom": "PCS", "qty": 1, "unit_price": "10"}],
        )
        with self.assertRaises(InvalidInvoiceStateError):
            payment_service.record_payment(invoice_id=draft.id, amount=Decimal("5"))

    def test_paid_invoice_accepts_no_more_payments(self):
        payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("115"))

        with self.assertRaises(InvalidInvoiceStateError):
            payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("1"))

    def test_overpayment_is_logged(self):
        with self.assertLogs("payments", level="WARNING"):
            payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("200"))

        invoice = self._reload()
        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertEqual(invoice.amount_paid, Decimal("200.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("0.00"))

    def test_sync_recovers_amount_paid(self):
        payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("15"))
        Invoice.objects.filter(id=self.invoice.id).update(amount_paid=Decimal("0.00"))

        invoice = payment_service.sync_invoice_paid(invoice_id=self.invoice.id)
        self.assertEqual(invoice.amount_paid, Decimal("15.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("100.00"))

    # =====================================================
    # MARK PAID
    # =====================================================

    def test_mark_paid_inserts_auto_payment(self):
        payment_service.record_payment(invoice_id=self.invoice.id, amount=Decimal("15"))

        invoice = payment_service.mark_invoice_paid(
            invoice_id=self.invoice.id, payment_date=date(2024, 3, 1)
        )

        auto = Payment.objects.get(invoice=invoice, is_auto=True)
        self.assertEqual(auto.amount, Decimal("100.00"))
        self.assertEqual(auto.method, "Auto Adjustment")
        self.assertEqual(auto.reference, "AUTO-PAID")
        self.assertEqual(auto.payment_date, date(2024, 3, 1))

        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertEqual(invoice.amount_paid, Decimal("115.00"))
        self.assertEqual(invoice.balance_remaining, Decimal("0.00"))

    def test_mark_paid_on_zero_total_invoice(self):
        free = invoice_service.create_invoice(
            customer=self.customer,
            lines=[{"description": "Sample", "uom": "PCS", "qty": 1, "unit_price": "0"}],
        )
        invoice_service.issue_invoice(invoice_id=free.id)

        invoice = payment_service.mark_invoice_paid(invoice_id=free.id)

        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertFalse(Payment.objects.filter(invoice=free).exists())

    def test_void_invoice_cannot_be_marked_paid(self):
        invoice_service.void_invoice(invoice_id=self.invoice.id)
        with self.assertRaises(InvalidInvoiceStateError):
            payment_service.mark_invoice_paid(invoice_id=self.invoice.id)
