# invoicing/services/payment_service.py

"""
PAYMENT SERVICE

- record_payment: append a payment (amount > 0) to an ISSUED / PARTIALLY_PAID
  invoice and refresh its paid amount, balance and status
- sync_invoice_paid: amount_paid = sum(payments); status from
  paid + credits vs gross_total
- mark_invoice_paid: settle the remaining balance with an auto payment row,
  so the payment rows always explain a PAID status

Payments are append-only; there is no update or delete path.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from invoicing.models import Invoice, Payment
from invoicing.services.exceptions import PaymentError
from invoicing.services.invoice_service import (
    lock_invoice,
    payments_total,
    refresh_balance_locked,
)
from invoicing.services.lifecycle import ensure_payable
from invoicing.services.money import round2, to_decimal

logger = logging.getLogger("payments")

AUTO_METHOD = "Auto Adjustment"
AUTO_REFERENCE = "AUTO-PAID"


@transaction.atomic
def record_payment(
    *,
    invoice_id,
    amount,
    payment_date=None,
    method: str = "Cash",
    reference: str = "",
    notes: str = "",
) -> Payment:
    logger.info(
        "Recording invoice payment",
        extra={"invoice_id": str(invoice_id), "amount": str(amount), "method": method},
    )

    amt = round2(amount)
    if amt <= Decimal("0.00"):
        logger.error("Invalid payment amount", extra={"amount": str(amount)})
        raise PaymentError("Payment amount must be greater than 0")

    invoice = lock_invoice(invoice_id)
    ensure_payable(invoice)

    if amt > to_decimal(invoice.balance_remaining):
        logger.warning(
            "Payment exceeds balance remaining",
            extra={
                "invoice_id": str(invoice.id),
                "amount": str(amt),
                "balance_remaining": str(invoice.balance_remaining),
            },
        )

    payment = Payment.objects.create(
        invoice=invoice,
        payment_date=payment_date or timezone.localdate(),
        amount=amt,
        method=method or "Cash",
        reference=(reference or "").strip(),
        notes=(notes or "").strip(),
    )

    refresh_balance_locked(invoice)

    logger.info(
        "Invoice payment recorded",
        extra={
            "invoice_id": str(invoice.id),
            "payment_id": str(payment.id),
            "status": invoice.status,
            "balance_remaining": str(invoice.balance_remaining),
        },
    )
    return payment


@transaction.atomic
def sync_invoice_paid(*, invoice_id) -> Invoice:
    invoice = lock_invoice(invoice_id)
    return refresh_balance_locked(invoice)


@transaction.atomic
def mark_invoice_paid(*, invoice_id, payment_date=None) -> Invoice:
    """
    Settle an ISSUED / PARTIALLY_PAID invoice in full.

    Inserts one auto payment for gross_total - credits - paid (if positive),
    then refreshes the header, which lands on PAID.
    """
    invoice = lock_invoice(invoice_id)
    ensure_payable(invoice)

    refresh_balance_locked(invoice)
    paid = payments_total(invoice)
    shortfall = round2(
        to_decimal(invoice.gross_total) - to_decimal(invoice.credits_applied) - paid
    )

    if shortfall > Decimal("0.00"):
        Payment.objects.create(
            invoice=invoice,
            payment_date=payment_date or timezone.localdate(),
            amount=shortfall,
            method=AUTO_METHOD,
            reference=AUTO_REFERENCE,
            notes="Auto payment inserted when invoice set to PAID",
            is_auto=True,
        )

    refresh_balance_locked(invoice)

    if invoice.status != Invoice.STATUS_PAID:
        # zero gross invoice with nothing received
        invoice.status = Invoice.STATUS_PAID
        invoice.save(update_fields=["status", "updated_at"])

    logger.info(
        "Invoice marked paid",
        extra={"invoice_id": str(invoice.id), "auto_amount": str(max(shortfall, Decimal("0.00")))},
    )
    return invoice
