# invoicing/services/credit_note_service.py

"""
CREDIT NOTE SERVICE

Purpose:
- Create credit notes with priced lines (base totals, never discounted)
- Move credit notes through ISSUED / PENDING / REFUNDED / VOID
- Keep the linked invoice's credits_applied, balance and status current

Rules:
- A linked invoice must belong to the same customer and be posted
  (ISSUED / PARTIALLY_PAID / PAID)
- Voiding a credit note that would re-open a PAID invoice is refused;
  invoice status never moves backwards
"""

import logging

from django.db import transaction

from customers.models import Customer
from invoicing.models import CreditNote, CreditNoteItem, Invoice
from invoicing.services.exceptions import CreditNoteError
from invoicing.services.invoice_service import (
    credits_total,
    default_vat_percent,
    lock_invoice,
    payments_total,
    refresh_balance_locked,
)
from invoicing.services.lifecycle import (
    SETTLE_TOLERANCE,
    validate_credit_note_transition,
)
from invoicing.services.lines import build_line_fields
from invoicing.services.money import round2, to_decimal
from invoicing.services.pricing import validate_vat_rate
from invoicing.services.totals import LineAmounts, base_totals

logger = logging.getLogger("invoicing")

CREATABLE_STATUSES = (CreditNote.STATUS_ISSUED, CreditNote.STATUS_PENDING)


def _lock_credit_note(credit_note_id) -> CreditNote:
    return CreditNote.objects.select_for_update().get(id=credit_note_id)


@transaction.atomic
def create_credit_note(
    *,
    customer: Customer,
    lines: list[dict],
    invoice_id=None,
    credit_note_date=None,
    vat_percent=None,
    reason: str = "",
    status: str = CreditNote.STATUS_ISSUED,
    sales_rep: str = "",
    sales_rep_phone: str = "",
) -> CreditNote:
    if status not in CREATABLE_STATUSES:
        raise CreditNoteError(f"Credit notes are created ISSUED or PENDING (got '{status}')")

    if not lines:
        raise CreditNoteError("Credit note requires at least one line")

    invoice = None
    if invoice_id:
        invoice = lock_invoice(invoice_id)
        if invoice.customer_id != customer.id:
            raise CreditNoteError(
                f"Invoice {invoice.invoice_number} belongs to another customer"
            )
        if invoice.status not in Invoice.POSTED_STATUSES:
            raise CreditNoteError(
                f"Invoice {invoice.invoice_number} is {invoice.status}; "
                "credit notes can only reduce posted invoices"
            )

    if vat_percent is None:
        vat = invoice.vat_percent if invoice is not None else default_vat_percent()
    else:
        vat = round2(validate_vat_rate(vat_percent))

    credit_note = CreditNote(
        customer=customer,
        invoice=invoice,
        status=status,
        vat_percent=vat,
        reason=(reason or "").strip(),
        sales_rep=(sales_rep or "").strip(),
        sales_rep_phone=(sales_rep_phone or "").strip(),
    )
    if credit_note_date:
        credit_note.credit_note_date = credit_note_date
    credit_note.save()

    amounts = []
    for line in lines:
        item = CreditNoteItem.objects.create(
            credit_note=credit_note,
            **build_line_fields(line, vat_percent=vat),
        )
        amounts.append(
            LineAmounts(
                quantity=item.quantity,
                unit_price_excl_vat=item.unit_price_excl_vat,
                vat_rate=item.vat_rate,
            )
        )

    totals = base_totals(amounts, vat_percent=vat)
    credit_note.subtotal = totals.subtotal
    credit_note.vat_amount = totals.vat_amount
    credit_note.total_amount = totals.total_amount
    credit_note.save(update_fields=["subtotal", "vat_amount", "total_amount", "updated_at"])

    if invoice is not None:
        refresh_balance_locked(invoice)

    logger.info(
        "Credit note created",
        extra={
            "credit_note_id": str(credit_note.id),
            "customer_id": str(customer.id),
            "invoice_id": str(invoice.id) if invoice else None,
            "total_amount": str(credit_note.total_amount),
        },
    )
    return credit_note


def _transition(*, credit_note_id, target_status: str) -> CreditNote:
    current = CreditNote.objects.get(id=credit_note_id)

    # invoice first, then credit note: same lock order as create
    invoice = lock_invoice(current.invoice_id) if current.invoice_id else None
    credit_note = _lock_credit_note(credit_note_id)

    validate_credit_note_transition(credit_note=credit_note, target_status=target_status)

    leaving_posted = (
        credit_note.status in CreditNote.POSTED_STATUSES
        and target_status not in CreditNote.POSTED_STATUSES
    )

    if invoice is not None and leaving_posted and invoice.status == Invoice.STATUS_PAID:
        received = (
            payments_total(invoice)
            + credits_total(invoice)
            - to_decimal(credit_note.total_amount)
        )
        if received + SETTLE_TOLERANCE < to_decimal(invoice.gross_total):
            raise CreditNoteError(
                f"Voiding {credit_note.credit_note_number} would re-open PAID invoice "
                f"{invoice.invoice_number}"
            )

    previous = credit_note.status
    credit_note.status = target_status
    credit_note.save(update_fields=["status", "updated_at"])

    if invoice is not None:
        refresh_balance_locked(invoice)

    logger.info(
        "Credit note status changed",
        extra={
            "credit_note_id": str(credit_note.id),
            "from_status": previous,
            "to_status": target_status,
        },
    )
    return credit_note


@transaction.atomic
def void_credit_note(*, credit_note_id) -> CreditNote:
    return _transition(credit_note_id=credit_note_id, target_status=CreditNote.STATUS_VOID)


@transaction.atomic
def refund_credit_note(*, credit_note_id) -> CreditNote:
    return _transition(credit_note_id=credit_note_id, target_status=CreditNote.STATUS_REFUNDED)


@transaction.atomic
def restore_credit_note(*, credit_note_id) -> CreditNote:
    return _transition(credit_note_id=credit_note_id, target_status=CreditNote.STATUS_ISSUED)
