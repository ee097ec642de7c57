"""
INVOICE & CREDIT NOTE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Invoice and CreditNote entities.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Status never moves backwards (PAID does not fall back to PARTIALLY_PAID)
"""

from decimal import Decimal

from invoicing.models import CreditNote, Invoice
from invoicing.services.exceptions import CreditNoteError, InvalidInvoiceStateError
from invoicing.services.money import to_decimal

# Paid + credits within this distance of the gross total counts as settled
SETTLE_TOLERANCE = Decimal("0.009")

# ============================================================
# INVOICE STATES
# ============================================================

INVOICE_TERMINAL_STATES = {
    Invoice.STATUS_VOID,
}

INVOICE_TRANSITIONS = {
    Invoice.STATUS_DRAFT: {
        Invoice.STATUS_ISSUED,
        Invoice.STATUS_VOID,
    },
    Invoice.STATUS_ISSUED: {
        Invoice.STATUS_PARTIALLY_PAID,
        Invoice.STATUS_PAID,
        Invoice.STATUS_VOID,
    },
    Invoice.STATUS_PARTIALLY_PAID: {
        Invoice.STATUS_PAID,
        Invoice.STATUS_VOID,
    },
    Invoice.STATUS_PAID: {
        Invoice.STATUS_VOID,
    },
}

INVOICE_EDITABLE_STATES = {
    Invoice.STATUS_DRAFT,
    Invoice.STATUS_ISSUED,
}

PAYABLE_STATES = {
    Invoice.STATUS_ISSUED,
    Invoice.STATUS_PARTIALLY_PAID,
}

# ============================================================
# CREDIT NOTE STATES
# ============================================================

CREDIT_NOTE_TRANSITIONS = {
    CreditNote.STATUS_ISSUED: {
        CreditNote.STATUS_VOID,
        CreditNote.STATUS_REFUNDED,
    },
    CreditNote.STATUS_PENDING: {
        CreditNote.STATUS_VOID,
    },
    CreditNote.STATUS_VOID: {
        CreditNote.STATUS_ISSUED,
    },
    CreditNote.STATUS_REFUNDED: {
        CreditNote.STATUS_ISSUED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in INVOICE_TERMINAL_STATES:
        return False

    return to_status in INVOICE_TRANSITIONS.get(from_status, set())


def validate_transition(*, invoice: Invoice, target_status: str):
    if not can_transition(from_status=invoice.status, to_status=target_status):
        raise InvalidInvoiceStateError(
            f"Invoice {invoice.invoice_number} cannot transition from "
            f"'{invoice.status}' to '{target_status}'"
        )


def ensure_editable(invoice: Invoice):
    if invoice.status not in INVOICE_EDITABLE_STATES:
        raise InvalidInvoiceStateError(
            f"Invoice {invoice.invoice_number} is {invoice.status}; "
            "lines, discount and VAT can only change while DRAFT or ISSUED"
        )


def ensure_payable(invoice: Invoice):
    if invoice.status not in PAYABLE_STATES:
        raise InvalidInvoiceStateError(
            f"Invoice {invoice.invoice_number} is {invoice.status}; "
            "payments are accepted only while ISSUED or PARTIALLY_PAID"
        )


def settled_status(*, current: str, gross_total, amount_paid, credits_applied) -> str:
    """
    Status implied by money received against the gross total.

    DRAFT and VOID are left alone. The result never ranks below `current`.
    """
    if current in (Invoice.STATUS_DRAFT, Invoice.STATUS_VOID):
        return current

    total = to_decimal(gross_total)
    received = to_decimal(amount_paid) + to_decimal(credits_applied)

    if received <= 0:
        implied = Invoice.STATUS_ISSUED
    elif received + SETTLE_TOLERANCE < total:
        implied = Invoice.STATUS_PARTIALLY_PAID
    else:
        implied = Invoice.STATUS_PAID

    if implied == current or can_transition(from_status=current, to_status=implied):
        return implied
    return current


def validate_credit_note_transition(*, credit_note: CreditNote, target_status: str):
    allowed = CREDIT_NOTE_TRANSITIONS.get(credit_note.status, set())
    if target_status not in allowed:
        raise CreditNoteError(
            f"Credit note {credit_note.credit_note_number} cannot transition from "
            f"'{credit_note.status}' to '{target_status}'"
        )
