# reports/services/snapshots.py

"""
REPORT SNAPSHOTS (READ MODELS)

Immutable copies of the posted documents the report builders work on.
The builders in this package are pure functions over these snapshots;
the load_* functions are the only place that touches the ORM.

Posted means:
- invoices in ISSUED / PARTIALLY_PAID / PAID
- credit notes in ISSUED / REFUNDED
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db.models import Q

from customers.models import Customer
from invoicing.models import CreditNote, CreditNoteItem, Invoice, InvoiceItem, Payment


@dataclass(frozen=True)
class CustomerSnapshot:
    id: object
    name: str
    client_name: str = ""
    customer_code: str = ""
    opening_balance: Decimal = Decimal("0.00")

    @property
    def primary_name(self) -> str:
        return self.client_name.strip() or self.name.strip() or f"Customer {self.id}"

    @property
    def secondary_name(self) -> str:
        a = self.client_name.strip()
        b = self.name.strip()
        return b if a and b and a != b else ""


@dataclass(frozen=True)
class InvoiceSnapshot:
    id: object
    number: str
    customer_id: object
    date: date
    status: str
    subtotal: Decimal
    vat_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    gross_total: Decimal
    balance_remaining: Decimal = Decimal("0.00")
    sales_rep: str = ""
    sales_rep_phone: str = ""


@dataclass(frozen=True)
class PaymentSnapshot:
    id: object
    invoice_id: object
    date: date
    amount: Decimal
    method: str = ""
    customer_id: object = None


@dataclass(frozen=True)
class CreditNoteSnapshot:
    id: object
    number: str
    customer_id: object
    date: date
    status: str
    subtotal: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    invoice_id: object = None
    reason: str = ""
    sales_rep: str = ""
    sales_rep_phone: str = ""


@dataclass(frozen=True)
class DocumentLineSnapshot:
    document_id: object
    date: date
    product_id: object
    sku: str
    product_name: str
    description: str
    uom: str
    quantity: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class CustomerHistory:
    invoices: tuple
    payments: tuple
    credit_notes: tuple


@dataclass(frozen=True)
class CustomerTransactions:
    invoices: tuple
    payments: tuple
    credit_notes: tuple
    customers: dict


@dataclass(frozen=True)
class PeriodDocuments:
    invoices: tuple
    credit_notes: tuple
    payments: tuple
    invoice_lines: tuple
    credit_lines: tuple
    customers: dict


# ============================================================
# ORM -> SNAPSHOT
# ============================================================


def customer_snapshot(c: Customer) -> CustomerSnapshot:
    return CustomerSnapshot(
        id=c.id,
        name=c.name or "",
        client_name=c.client_name or "",
        customer_code=c.customer_code or "",
        opening_balance=c.opening_balance,
    )


def invoice_snapshot(i: Invoice) -> InvoiceSnapshot:
    return InvoiceSnapshot(
        id=i.id,
        number=i.invoice_number,
        customer_id=i.customer_id,
        date=i.invoice_date,
        status=i.status,
        subtotal=i.subtotal,
        vat_amount=i.vat_amount,
        discount_amount=i.discount_amount,
        total_amount=i.total_amount,
        gross_total=i.gross_total,
        balance_remaining=i.balance_remaining,
        sales_rep=i.sales_rep or "",
        sales_rep_phone=i.sales_rep_phone or "",
    )


def payment_snapshot(p: Payment, *, customer_id=None) -> PaymentSnapshot:
    return PaymentSnapshot(
        id=p.id,
        invoice_id=p.invoice_id,
        date=p.payment_date,
        amount=p.amount,
        method=p.method or "",
        customer_id=customer_id,
    )


def credit_note_snapshot(c: CreditNote) -> CreditNoteSnapshot:
    return CreditNoteSnapshot(
        id=c.id,
        number=c.credit_note_number,
        customer_id=c.customer_id,
        date=c.credit_note_date,
        status=c.status,
        subtotal=c.subtotal,
        vat_amount=c.vat_amount,
        total_amount=c.total_amount,
        invoice_id=c.invoice_id,
        reason=c.reason or "",
        sales_rep=c.sales_rep or "",
        sales_rep_phone=c.sales_rep_phone or "",
    )


def _line_snapshot(item, *, document_id, document_date) -> DocumentLineSnapshot:
    product = item.product
    return DocumentLineSnapshot(
        document_id=document_id,
        date=document_date,
        product_id=item.product_id,
        sku=getattr(product, "sku", "") or getattr(product, "item_code", "") or "",
        product_name=getattr(product, "name", "") or "",
        description=item.description or "",
        uom=item.uom or "",
        quantity=item.quantity,
        line_total=item.line_total,
    )


# ============================================================
# LOADERS
# ============================================================


def posted_invoices():
    return Invoice.objects.filter(status__in=Invoice.POSTED_STATUSES)


def posted_credit_notes():
    return CreditNote.objects.filter(status__in=CreditNote.POSTED_STATUSES)


def load_customer_history(*, customer_id, date_to) -> CustomerHistory:
    """
    Everything a statement needs: posted documents up to date_to.

    Payments and linked credit notes are loaded regardless of date so the
    PAID shortfall check sees settlements made after the window;
    build_statement drops late events.
    """
    invoices = list(
        posted_invoices().filter(customer_id=customer_id, invoice_date__lte=date_to)
    )
    invoice_ids = [i.id for i in invoices]
    payments = Payment.objects.filter(invoice__in=invoice_ids)
    credit_notes = posted_credit_notes().filter(
        Q(customer_id=customer_id, credit_note_date__lte=date_to)
        | Q(invoice__in=invoice_ids)
    )

    return CustomerHistory(
        invoices=tuple(invoice_snapshot(i) for i in invoices),
        payments=tuple(payment_snapshot(p) for p in payments),
        credit_notes=tuple(credit_note_snapshot(c) for c in credit_notes),
    )


def load_period_documents(*, date_from, date_to, customer_id=None) -> PeriodDocuments:
    """
    Posted invoices / credit notes dated inside [date_from, date_to], their
    lines, and the payments (dated <= date_to) of those invoices.
    """
    invoices = posted_invoices().filter(
        invoice_date__gte=date_from, invoice_date__lte=date_to
    )
    credit_notes = posted_credit_notes().filter(
        credit_note_date__gte=date_from, credit_note_date__lte=date_to
    )
    if customer_id:
        invoices = invoices.filter(customer_id=customer_id)
        credit_notes = credit_notes.filter(customer_id=customer_id)

    invoices = list(invoices)
    credit_notes = list(credit_notes)
    invoice_dates = {i.id: i.invoice_date for i in invoices}
    credit_dates = {c.id: c.credit_note_date for c in credit_notes}

    payments = Payment.objects.filter(
        invoice__in=list(invoice_dates.keys()),
        payment_date__lte=date_to,
    )
    invoice_items = InvoiceItem.objects.select_related("product").filter(
        invoice__in=list(invoice_dates.keys())
    )
    credit_items = CreditNoteItem.objects.select_related("product").filter(
        credit_note__in=list(credit_dates.keys())
    )

    customer_ids = {i.customer_id for i in invoices} | {c.customer_id for c in credit_notes}
    customers = {
        c.id: customer_snapshot(c) for c in Customer.objects.filter(id__in=customer_ids)
    }

    return PeriodDocuments(
        invoices=tuple(invoice_snapshot(i) for i in invoices),
        credit_notes=tuple(credit_note_snapshot(c) for c in credit_notes),
        payments=tuple(payment_snapshot(p) for p in payments),
        invoice_lines=tuple(
            _line_snapshot(
                it, document_id=it.invoice_id, document_date=invoice_dates[it.invoice_id]
            )
            for it in invoice_items
        ),
        credit_lines=tuple(
            _line_snapshot(
                it,
                document_id=it.credit_note_id,
                document_date=credit_dates[it.credit_note_id],
            )
            for it in credit_items
        ),
        customers=customers,
    )


def load_customer_transactions(*, date_from, date_to, customer_id=None) -> CustomerTransactions:
    """
    Posted invoices, credit notes and payments dated inside the window
    (payments by their own date, tagged with the invoice customer).
    """
    invoices = posted_invoices().filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
    payments = Payment.objects.select_related("invoice").filter(
        invoice__status__in=Invoice.POSTED_STATUSES,
        payment_date__gte=date_from,
        payment_date__lte=date_to,
    )
    credit_notes = posted_credit_notes().filter(
        credit_note_date__gte=date_from, credit_note_date__lte=date_to
    )
    customers = Customer.objects.all()

    if customer_id:
        invoices = invoices.filter(customer_id=customer_id)
        payments = payments.filter(invoice__customer_id=customer_id)
        credit_notes = credit_notes.filter(customer_id=customer_id)
        customers = customers.filter(id=customer_id)

    return CustomerTransactions(
        invoices=tuple(invoice_snapshot(i) for i in invoices),
        payments=tuple(
            payment_snapshot(p, customer_id=p.invoice.customer_id) for p in payments
        ),
        credit_notes=tuple(credit_note_snapshot(c) for c in credit_notes),
        customers={c.id: customer_snapshot(c) for c in customers},
    )


def load_open_invoices(*, customer_id=None) -> tuple:
    qs = Invoice.objects.exclude(
        status__in=(Invoice.STATUS_DRAFT, Invoice.STATUS_VOID)
    ).filter(balance_remaining__gt=Decimal("0.00"))
    if customer_id:
        qs = qs.filter(customer_id=customer_id)
    return tuple(invoice_snapshot(i) for i in qs)


def load_customers(ids) -> dict:
    return {c.id: customer_snapshot(c) for c in Customer.objects.filter(id__in=set(ids))}
