# reports/services/statement.py

"""
CUSTOMER STATEMENT (LEDGER REPLAY)

Purpose:
- Rebuild a customer's account as signed events and walk them in order

Events (posted documents only):
- INVOICE      +total_amount   (invoice date)
- CREDIT_NOTE  -total_amount   (credit note date)
- PAYMENT      -amount         (payment date)

Order: (date, kind rank, reference) with INVOICE=1, CREDIT_NOTE=2, PAYMENT=3.

Balances:
- opening  = sum of events dated before date_from
- running  = cumulative sum over the full history
- closing  = running balance after the last event <= date_to
           = opening + sum of the movements inside the window

Reconciliation:
- A PAID invoice whose payment rows (plus linked credit notes) add up to
  less than its total gets one synthetic PAYMENT for the shortfall, dated
  at the invoice date. This is a data-quality repair: it is logged, never
  raised.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from django.conf import settings

from invoicing.models import Invoice
from invoicing.services.money import round2
from reports.services.exceptions import validate_range
from reports.services.snapshots import (
    CreditNoteSnapshot,
    InvoiceSnapshot,
    PaymentSnapshot,
    load_customer_history,
)

logger = logging.getLogger("reports")

KIND_OPENING = "OPENING"
KIND_INVOICE = "INVOICE"
KIND_CREDIT_NOTE = "CREDIT_NOTE"
KIND_PAYMENT = "PAYMENT"

KIND_RANK = {
    KIND_INVOICE: 1,
    KIND_CREDIT_NOTE: 2,
    KIND_PAYMENT: 3,
}

# shortfalls at or below this are rounding noise
SHORTFALL_EPSILON = Decimal("0.0001")


@dataclass(frozen=True)
class LedgerEvent:
    date: date
    kind: str
    reference: str
    details: str
    amount: Decimal
    synthetic: bool = False

    @property
    def sort_key(self):
        return (self.date, KIND_RANK[self.kind], self.reference)


@dataclass(frozen=True)
class StatementLine:
    date: date
    kind: str
    reference: str
    details: str
    amount: Decimal
    running_balance: Decimal
    synthetic: bool = False


@dataclass(frozen=True)
class StatementSummary:
    invoiced: Decimal
    paid: Decimal
    credited: Decimal


@dataclass(frozen=True)
class Statement:
    customer_id: object
    date_from: date
    date_to: date
    opening_balance: Decimal
    closing_balance: Decimal
    lines: tuple
    summary: StatementSummary

    @property
    def movements(self) -> tuple:
        return tuple(line for line in self.lines if line.kind != KIND_OPENING)


# ============================================================
# EVENTS
# ============================================================


def _invoice_details(status: str) -> str:
    if status == Invoice.STATUS_PAID:
        return "Invoice (Paid)"
    if status == Invoice.STATUS_PARTIALLY_PAID:
        return "Invoice (Partially Paid)"
    return "Invoice"


def synthesize_missing_payments(
    invoices: Iterable[InvoiceSnapshot],
    payments: Iterable[PaymentSnapshot],
    credit_notes: Iterable[CreditNoteSnapshot] = (),
) -> list[LedgerEvent]:
    """
    One PAYMENT event per PAID invoice whose payments fall short of its total.

    Posted credit notes linked to the invoice count as settlement, so an
    invoice closed by a credit note gets no synthetic payment.
    """
    paid_by_invoice = defaultdict(Decimal)
    for p in payments:
        paid_by_invoice[p.invoice_id] += p.amount
    for cn in credit_notes:
        if cn.invoice_id is not None:
            paid_by_invoice[cn.invoice_id] += cn.total_amount

    events = []
    for inv in invoices:
        if inv.status != Invoice.STATUS_PAID:
            continue

        shortfall = inv.total_amount - paid_by_invoice[inv.id]
        if shortfall <= SHORTFALL_EPSILON:
            continue

        logger.warning(
            "Paid invoice has no matching payment rows; synthesizing payment",
            extra={
                "invoice_id": str(inv.id),
                "invoice_number": inv.number,
                "shortfall": str(shortfall),
            },
        )
        events.append(
            LedgerEvent(
                date=inv.date,
                kind=KIND_PAYMENT,
                reference=f"INV {inv.number}",
                details="Payment • (Auto) Status = PAID",
                amount=-shortfall,
                synthetic=True,
            )
        )
    return events


def build_events(
    *,
    invoices: Iterable[InvoiceSnapshot],
    payments: Iterable[PaymentSnapshot],
    credit_notes: Iterable[CreditNoteSnapshot],
    reconcile_paid: bool = True,
) -> list[LedgerEvent]:
    invoices = list(invoices)
    payments = list(payments)
    credit_notes = list(credit_notes)
    numbers = {inv.id: inv.number for inv in invoices}

    events = [
        LedgerEvent(
            date=inv.date,
            kind=KIND_INVOICE,
            reference=inv.number,
            details=_invoice_details(inv.status),
            amount=inv.total_amount,
        )
        for inv in invoices
    ]

    for p in payments:
        number = numbers.get(p.invoice_id)
        events.append(
            LedgerEvent(
                date=p.date,
                kind=KIND_PAYMENT,
                reference=f"INV {number}" if number else f"Invoice {p.invoice_id}",
                details=f"Payment • {p.method or '—'}",
                amount=-p.amount,
            )
        )

    if reconcile_paid:
        events.extend(synthesize_missing_payments(invoices, payments, credit_notes))

    for cn in credit_notes:
        events.append(
            LedgerEvent(
                date=cn.date,
                kind=KIND_CREDIT_NOTE,
                reference=cn.number,
                details=f"Credit Note • {cn.reason}" if cn.reason else "Credit Note",
                amount=-cn.total_amount,
            )
        )

    events.sort(key=lambda e: e.sort_key)
    return events


# ============================================================
# STATEMENT
# ============================================================


def build_statement(
    *,
    customer_id,
    date_from: date,
    date_to: date,
    invoices: Iterable[InvoiceSnapshot],
    payments: Iterable[PaymentSnapshot],
    credit_notes: Iterable[CreditNoteSnapshot],
    reconcile_paid: bool = True,
) -> Statement:
    validate_range(date_from, date_to)

    events = [
        e
        for e in build_events(
            invoices=invoices,
            payments=payments,
            credit_notes=credit_notes,
            reconcile_paid=reconcile_paid,
        )
        if e.date <= date_to
    ]

    opening = sum((e.amount for e in events if e.date < date_from), Decimal("0"))
    opening = round2(opening)

    lines = [
        StatementLine(
            date=date_from,
            kind=KIND_OPENING,
            reference="",
            details="Opening balance",
            amount=opening,
            running_balance=opening,
        )
    ]

    running = Decimal("0")
    invoiced = paid = credited = Decimal("0")

    for e in events:
        running += e.amount
        if e.date < date_from:
            continue

        lines.append(
            StatementLine(
                date=e.date,
                kind=e.kind,
                reference=e.reference,
                details=e.details,
                amount=round2(e.amount),
                running_balance=round2(running),
                synthetic=e.synthetic,
            )
        )

        if e.kind == KIND_INVOICE:
            invoiced += e.amount
        elif e.kind == KIND_PAYMENT:
            paid += -e.amount
        else:
            credited += -e.amount

    return Statement(
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        opening_balance=opening,
        closing_balance=round2(running),
        lines=tuple(lines),
        summary=StatementSummary(
            invoiced=round2(invoiced),
            paid=round2(paid),
            credited=round2(credited),
        ),
    )


def statement_for_customer(*, customer_id, date_from: date, date_to: date) -> Statement:
    validate_range(date_from, date_to)

    history = load_customer_history(customer_id=customer_id, date_to=date_to)

    return build_statement(
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        invoices=history.invoices,
        payments=history.payments,
        credit_notes=history.credit_notes,
        reconcile_paid=getattr(settings, "STATEMENT_RECONCILE_PAID_INVOICES", True),
    )
