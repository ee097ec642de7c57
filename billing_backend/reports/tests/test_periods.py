# reports/tests/test_periods.py

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from reports.services.periods import (
    Granularity,
    aggregate_by_customer,
    aggregate_by_product,
    aggregate_by_sales_rep,
    aggregate_periods,
    aggregate_vat,
    customer_activity,
    period_key,
    summarize_period,
)
from reports.services.snapshots import (
    CreditNoteSnapshot,
    CustomerSnapshot,
    DocumentLineSnapshot,
    InvoiceSnapshot,
    PaymentSnapshot,
)

D = Decimal


def invoice(d, subtotal, vat="0", discount="0", customer=None, rep="", phone=""):
    subtotal, vat = D(subtotal), D(vat)
    return InvoiceSnapshot(
        id=uuid.uuid4(),
        number=f"INV-{uuid.uuid4().hex[:6]}",
        customer_id=customer or uuid.uuid4(),
        date=d,
        status="ISSUED",
        subtotal=subtotal,
        vat_amount=vat,
        discount_amount=D(discount),
        total_amount=subtotal + vat,
        gross_total=subtotal + vat,
        sales_rep=rep,
        sales_rep_phone=phone,
    )


def credit_note(d, subtotal, vat="0", customer=None, rep=""):
    subtotal, vat = D(subtotal), D(vat)
    return CreditNoteSnapshot(
        id=uuid.uuid4(),
        number=f"CN-{uuid.uuid4().hex[:6]}",
        customer_id=customer or uuid.uuid4(),
        date=d,
        status="ISSUED",
        subtotal=subtotal,
        vat_amount=vat,
        total_amount=subtotal + vat,
        sales_rep=rep,
    )


def line(d, product_id, qty, total, name="Rice", uom="KG"):
    return DocumentLineSnapshot(
        document_id=uuid.uuid4(),
        date=d,
        product_id=product_id,
        sku="RICE-25" if product_id else "",
        product_name=name if product_id else "",
        description="",
        uom=uom,
        quantity=D(qty),
        line_total=D(total),
    )


class PeriodKeyTests(SimpleTestCase):
    def test_keys(self):
        d = date(2024, 3, 7)
        self.assertEqual(period_key(d, Granularity.DAY), "2024-03-07")
        self.assertEqual(period_key(d, Granularity.MONTH), "2024-03")
        self.assertEqual(period_key(d, "YEAR"), "2024")


class AggregatePeriodsTests(SimpleTestCase):
    """
    GUARANTEES:
    - invoices add, credit notes subtract
    - collected is matched to the invoice's period, not the payment's
    """

    def test_payment_counts_in_invoice_period(self):
        inv = invoice(date(2024, 1, 10), "300")
        pay = PaymentSnapshot(id=uuid.uuid4(), invoice_id=inv.id, date=date(2024, 2, 2), amount=D("300"))

        rows = aggregate_periods(
            invoices=[inv],
            credit_notes=[],
            payments=[pay],
            granularity=Granularity.DAY,
            date_from=date(2024, 1, 1),
            date_to=date(2024, 2, 29),
        )

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].key, "2024-01-10")
        self.assertEqual(rows[0].collected, D("300.00"))
        self.assertEqual(rows[0].net_after_payments, D("0.00"))

    def test_payment_after_window_is_not_collected(self):
        inv = invoice(date(2024, 1, 10), "300")
        pay = PaymentSnapshot(id=uuid.uuid4(), invoice_id=inv.id, date=date(2024, 2, 2), amount=D("300"))

        rows = aggregate_periods(
            invoices=[inv],
            credit_notes=[],
            payments=[pay],
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
        )
        self.assertEqual(rows[0].collected, D("0.00"))

    def test_credit_notes_net_against_invoices(self):
        customer = uuid.uuid4()
        rows = aggregate_periods(
            invoices=[invoice(date(2024, 1, 10), "100", vat="15", customer=customer)],
            credit_notes=[credit_note(date(2024, 1, 20), "20", vat="3", customer=customer)],
            granularity=Granularity.MONTH,
        )

        self.assertEqual(len(rows), 1)
        bucket = rows[0]
        self.assertEqual(bucket.key, "2024-01")
        self.assertEqual(bucket.invoices, 1)
        self.assertEqual(bucket.credit_notes, 1)
        self.assertEqual(bucket.unique_customers, 1)
        self.assertEqual(bucket.subtotal, D("80.00"))
        self.assertEqual(bucket.vat, D("12.00"))
        self.assertEqual(bucket.total, D("92.00"))

    def test_buckets_are_sorted(self):
        rows = aggregate_periods(
            invoices=[invoice(date(2024, 3, 1), "1"), invoice(date(2024, 1, 1), "1")],
            credit_notes=[],
            granularity=Granularity.MONTH,
        )
        self.assertEqual([r.key for r in rows], ["2024-01", "2024-03"])

    def test_vat_report(self):
        rows = aggregate_vat(
            invoices=[invoice(date(2024, 1, 10), "100", vat="15")],
            credit_notes=[credit_note(date(2024, 2, 1), "20", vat="3")],
            granularity=Granularity.MONTH,
        )
        self.assertEqual([(r.key, r.amount) for r in rows], [("2024-01", D("15.00")), ("2024-02", D("-3.00"))])


class DimensionRollupTests(SimpleTestCase):
    def test_sales_rep_blank_label_and_phone(self):
        rows = aggregate_by_sales_rep(
            invoices=[
                invoice(date(2024, 1, 1), "100", rep="Thandi", phone="082 000 0000"),
                invoice(date(2024, 1, 2), "50", rep=""),
            ],
            credit_notes=[credit_note(date(2024, 1, 3), "10", rep="Thandi")],
        )

        by_label = {r.label: r for r in rows}
        self.assertEqual(by_label["Thandi"].total, D("90.00"))
        self.assertEqual(by_label["Thandi"].secondary, "082 000 0000")
        self.assertEqual(by_label["—"].total, D("50.00"))
        self.assertIsNone(by_label["—"].period)

    def test_customer_rollup_uses_client_name(self):
        cid = uuid.uuid4()
        customers = {cid: CustomerSnapshot(id=cid, name="Corner Shop", client_name="Sipho")}

        rows = aggregate_by_customer(
            invoices=[invoice(date(2024, 1, 10), "100", customer=cid)],
            credit_notes=[],
            customers=customers,
        )

        self.assertEqual(rows[0].period, "2024-01")
        self.assertEqual(rows[0].label, "Sipho")
        self.assertEqual(rows[0].secondary, "Corner Shop")

    def test_product_rollup_whole_window_skips_unlinked_returns(self):
        pid = uuid.uuid4()
        rows = aggregate_by_product(
            invoice_lines=[line(date(2024, 1, 1), pid, "50", "100")],
            credit_lines=[
                line(date(2024, 1, 2), pid, "10", "20"),
                line(date(2024, 1, 3), None, "1", "5"),
            ],
        )

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].quantity, D("40.000"))
        self.assertEqual(rows[0].sales, D("80.00"))

    def test_product_rollup_per_period_keeps_returned_items(self):
        rows = aggregate_by_product(
            invoice_lines=[],
            credit_lines=[line(date(2024, 1, 3), None, "1", "5")],
            granularity=Granularity.MONTH,
        )

        self.assertEqual(rows[0].product, "Returned item")
        self.assertEqual(rows[0].sales, D("-5.00"))

    def test_customer_activity_top_six(self):
        invoices = [invoice(date(2024, 1, 1), str(10 * (i + 1))) for i in range(8)]
        rows = customer_activity(invoices=invoices, credit_notes=[], granularity=Granularity.MONTH)

        self.assertEqual(rows[0].unique_customers, 8)
        self.assertEqual(len(rows[0].top_customers), 6)
        self.assertEqual(rows[0].top_customers[0].amount, D("80.00"))


class SummaryTests(SimpleTestCase):
    def test_kpi_strip(self):
        inv = invoice(date(2024, 1, 10), "100", vat="15", discount="5")
        pay = PaymentSnapshot(id=uuid.uuid4(), invoice_id=inv.id, date=date(2024, 1, 11), amount=D("50"))

        s = summarize_period(
            invoices=[inv],
            credit_notes=[credit_note(date(2024, 1, 12), "10")],
            payments=[pay],
            invoice_lines=[line(date(2024, 1, 10), uuid.uuid4(), "4", "100")],
            credit_lines=[line(date(2024, 1, 12), None, "1", "10")],
        )

        self.assertEqual(s.revenue, D("105.00"))
        self.assertEqual(s.vat, D("15.00"))
        self.assertEqual(s.discount, D("5.00"))
        self.assertEqual(s.collected, D("50.00"))
        self.assertEqual(s.net_after_payments, D("55.00"))
        self.assertEqual(s.quantity_sold, D("3.000"))
        self.assertEqual(s.unique_customers, 2)
