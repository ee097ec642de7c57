# invoicing/services/invoice_service.py

"""
INVOICE SERVICE (DOMAIN-CONTROLLED)

Purpose:
- Create invoices with priced lines
- Add / remove lines, change discount or VAT, recompute the header
- Issue and void invoices

CONCURRENCY:
- Every mutation runs in transaction.atomic() with the invoice row locked
  (select_for_update); lines and payments are re-read inside the lock and
  the header is written once.
- Any InvoicingError rolls the whole operation back (no partial totals).

RECOMPUTE POLICY:
- mode_for(invoice): PROPORTIONAL_DISCOUNT while a discount % is set,
  otherwise BASE_RECOMPUTE. Line edits and VAT changes use it so the
  discount survives them.
- An explicit BASE_RECOMPUTE clears the discount.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from customers.models import Customer
from invoicing.models import CreditNote, Invoice, InvoiceItem, Payment
from invoicing.services.exceptions import InvalidInvoiceStateError
from invoicing.services.lifecycle import (
    ensure_editable,
    settled_status,
    validate_transition,
)
from invoicing.services.lines import build_line_fields, reprice_fields
from invoicing.services.money import ZERO, clamp_percent, round2, to_decimal
from invoicing.services.pricing import validate_vat_rate
from invoicing.services.totals import LineAmounts, RecomputeMode, Totals, compute_totals

logger = logging.getLogger("invoicing")


# ============================================================
# HELPERS
# ============================================================


def default_vat_percent() -> Decimal:
    return round2(getattr(settings, "DEFAULT_VAT_PERCENT", "15.00"))


def mode_for(invoice: Invoice) -> RecomputeMode:
    if to_decimal(invoice.discount_percent) > 0:
        return RecomputeMode.PROPORTIONAL_DISCOUNT
    return RecomputeMode.BASE_RECOMPUTE


def lock_invoice(invoice_id) -> Invoice:
    """Must be called inside transaction.atomic()."""
    return Invoice.objects.select_for_update().get(id=invoice_id)


def payments_total(invoice: Invoice) -> Decimal:
    total = Payment.objects.filter(invoice=invoice).aggregate(
        s=Coalesce(Sum("amount"), ZERO)
    )["s"]
    return round2(total)


def credits_total(invoice: Invoice) -> Decimal:
    total = CreditNote.objects.filter(
        invoice=invoice,
        status__in=CreditNote.POSTED_STATUSES,
    ).aggregate(s=Coalesce(Sum("total_amount"), ZERO))["s"]
    return round2(total)


def line_amounts(invoice: Invoice) -> list[LineAmounts]:
    return [
        LineAmounts(
            quantity=item.quantity,
            unit_price_excl_vat=item.unit_price_excl_vat,
            vat_rate=item.vat_rate,
        )
        for item in InvoiceItem.objects.filter(invoice=invoice).order_by("created_at")
    ]


def _write_totals(invoice: Invoice, totals: Totals):
    for field, value in totals.as_fields().items():
        setattr(invoice, field, value)

    invoice.status = settled_status(
        current=invoice.status,
        gross_total=totals.gross_total,
        amount_paid=totals.amount_paid,
        credits_applied=totals.credits_applied,
    )

    invoice.save(update_fields=[*totals.as_fields().keys(), "status", "updated_at"])


def _recompute_locked(invoice: Invoice, mode: RecomputeMode | None = None) -> Totals:
    mode = RecomputeMode(mode) if mode else mode_for(invoice)

    if mode == RecomputeMode.BASE_RECOMPUTE and to_decimal(invoice.discount_percent) > 0:
        logger.info(
            "Base recompute clears invoice discount",
            extra={
                "invoice_id": str(invoice.id),
                "discount_percent": str(invoice.discount_percent),
            },
        )

    totals = compute_totals(
        line_amounts(invoice),
        mode=mode,
        discount_percent=invoice.discount_percent,
        vat_percent=invoice.vat_percent,
        previous_balance=invoice.previous_balance,
        amount_paid=payments_total(invoice),
        credits_applied=credits_total(invoice),
    )

    _write_totals(invoice, totals)

    logger.info(
        "Invoice totals recomputed",
        extra={
            "invoice_id": str(invoice.id),
            "mode": mode.value,
            "total_amount": str(totals.total_amount),
            "balance_remaining": str(totals.balance_remaining),
        },
    )
    return totals


def refresh_balance_locked(invoice: Invoice) -> Invoice:
    """
    Re-read payments and credits and refresh paid / balance / status
    without touching the line-derived totals.
    """
    paid = payments_total(invoice)
    credits = credits_total(invoice)

    invoice.amount_paid = paid
    invoice.credits_applied = credits
    invoice.balance_remaining = round2(
        max(Decimal("0"), to_decimal(invoice.gross_total) - paid - credits)
    )
    invoice.status = settled_status(
        current=invoice.status,
        gross_total=invoice.gross_total,
        amount_paid=paid,
        credits_applied=credits,
    )
    invoice.save(
        update_fields=[
            "amount_paid",
            "credits_applied",
            "balance_remaining",
            "status",
            "updated_at",
        ]
    )
    return invoice


# ============================================================
# CREATE
# ============================================================


@transaction.atomic
def create_invoice(
    *,
    customer: Customer,
    lines: list[dict],
    invoice_date=None,
    due_date=None,
    vat_percent=None,
    discount_percent=None,
    previous_balance=None,
    sales_rep: str = "",
    sales_rep_phone: str = "",
    purchase_order_no: str = "",
    notes: str = "",
) -> Invoice:
    """
    Create a DRAFT invoice, price its lines and compute the header.

    Any line error (quantity, product, price, VAT) aborts the whole invoice.
    """
    vat = default_vat_percent() if vat_percent is None else round2(validate_vat_rate(vat_percent))

    invoice = Invoice(
        customer=customer,
        due_date=due_date,
        vat_percent=vat,
        discount_percent=round2(clamp_percent(discount_percent)),
        previous_balance=round2(previous_balance),
        sales_rep=(sales_rep or "").strip(),
        sales_rep_phone=(sales_rep_phone or "").strip(),
        purchase_order_no=(purchase_order_no or "").strip(),
        notes=notes or "",
    )
    if invoice_date:
        invoice.invoice_date = invoice_date
    invoice.save()

    for line in lines or []:
        InvoiceItem.objects.create(invoice=invoice, **build_line_fields(line, vat_percent=vat))

    _recompute_locked(lock_invoice(invoice.id))

    logger.info(
        "Invoice created",
        extra={
            "invoice_id": str(invoice.id),
            "customer_id": str(customer.id),
            "lines": len(lines or []),
        },
    )
    return Invoice.objects.get(id=invoice.id)


# ============================================================
# LINES
# ============================================================


@transaction.atomic
def add_item(*, invoice_id, line: dict, recompute: bool = True) -> InvoiceItem:
    invoice = lock_invoice(invoice_id)
    ensure_editable(invoice)

    item = InvoiceItem.objects.create(
        invoice=invoice,
        **build_line_fields(line, vat_percent=invoice.vat_percent),
    )

    if recompute:
        _recompute_locked(invoice)

    return item


@transaction.atomic
def remove_item(*, invoice_id, item_id, recompute: bool = True) -> Invoice:
    invoice = lock_invoice(invoice_id)
    ensure_editable(invoice)

    item = InvoiceItem.objects.get(id=item_id, invoice=invoice)
    item.delete()

    if recompute:
        _recompute_locked(invoice)

    return invoice


# ============================================================
# HEADER CHANGES
# ============================================================


@transaction.atomic
def recompute_invoice(*, invoice_id, mode=None) -> Invoice:
    """
    Recompute the header from the lines.

    mode=None follows mode_for(invoice); BASE_RECOMPUTE clears the discount.
    """
    invoice = lock_invoice(invoice_id)
    if invoice.status == Invoice.STATUS_VOID:
        raise InvalidInvoiceStateError(
            f"Invoice {invoice.invoice_number} is VOID and cannot be recomputed"
        )

    _recompute_locked(invoice, mode)
    return invoice


@transaction.atomic
def apply_discount(*, invoice_id, discount_percent) -> Invoice:
    invoice = lock_invoice(invoice_id)
    ensure_editable(invoice)

    invoice.discount_percent = round2(clamp_percent(discount_percent))
    _recompute_locked(invoice, RecomputeMode.PROPORTIONAL_DISCOUNT)
    return invoice


@transaction.atomic
def set_vat_percent(*, invoice_id, vat_percent) -> Invoice:
    """
    Change the document VAT %.

    Lines following the document rate are re-priced; lines with their own
    rate keep it. The header is then recomputed from the lines.
    """
    invoice = lock_invoice(invoice_id)
    ensure_editable(invoice)

    invoice.vat_percent = round2(validate_vat_rate(vat_percent))
    invoice.save(update_fields=["vat_percent", "updated_at"])

    for item in InvoiceItem.objects.filter(invoice=invoice, vat_rate__isnull=True):
        for field, value in reprice_fields(item, vat_percent=invoice.vat_percent).items():
            setattr(item, field, value)
        item.save(update_fields=["unit_vat", "unit_price_incl_vat", "line_total"])

    _recompute_locked(invoice)
    return invoice


# ============================================================
# LIFECYCLE
# ============================================================


@transaction.atomic
def issue_invoice(*, invoice_id) -> Invoice:
    invoice = lock_invoice(invoice_id)
    validate_transition(invoice=invoice, target_status=Invoice.STATUS_ISSUED)

    if not InvoiceItem.objects.filter(invoice=invoice).exists():
        raise InvalidInvoiceStateError(
            f"Invoice {invoice.invoice_number} has no lines and cannot be issued"
        )

    invoice.status = Invoice.STATUS_ISSUED
    invoice.save(update_fields=["status", "updated_at"])

    # credits may already settle it
    _recompute_locked(invoice)

    logger.info("Invoice issued", extra={"invoice_id": str(invoice.id)})
    return invoice


@transaction.atomic
def void_invoice(*, invoice_id) -> Invoice:
    invoice = lock_invoice(invoice_id)
    validate_transition(invoice=invoice, target_status=Invoice.STATUS_VOID)

    invoice.status = Invoice.STATUS_VOID
    invoice.save(update_fields=["status", "updated_at"])

    logger.info("Invoice voided", extra={"invoice_id": str(invoice.id)})
    return invoice
