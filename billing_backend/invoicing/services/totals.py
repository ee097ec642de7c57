# invoicing/services/totals.py

"""
DOCUMENT TOTALS (PURE)

Two ways to derive an invoice header from its lines:

BASE_RECOMPUTE
- items are the source of truth, discount is cleared
- bases are summed per VAT-rate bucket, VAT is taken on each bucket

PROPORTIONAL_DISCOUNT
- discount % scales every line base independently, then VAT per line
- items are never touched; only the header changes
- discount 0 is exactly BASE_RECOMPUTE

Both finish with:
    total             = subtotal + vat_amount
    gross_total       = total + previous_balance
    balance_remaining = max(0, gross_total - amount_paid - credits_applied)

No database access here; invoice_service loads rows and persists the result.
"""

import enum
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from invoicing.services.money import HUNDRED, ZERO, clamp_percent, round2, to_decimal
from invoicing.services.pricing import validate_vat_rate


class RecomputeMode(str, enum.Enum):
    BASE_RECOMPUTE = "BASE_RECOMPUTE"
    PROPORTIONAL_DISCOUNT = "PROPORTIONAL_DISCOUNT"


@dataclass(frozen=True)
class LineAmounts:
    quantity: Decimal
    unit_price_excl_vat: Decimal
    vat_rate: Decimal | None = None

    @property
    def base(self) -> Decimal:
        return to_decimal(self.quantity) * to_decimal(self.unit_price_excl_vat)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    vat_amount: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    previous_balance: Decimal
    gross_total: Decimal
    amount_paid: Decimal
    credits_applied: Decimal
    balance_remaining: Decimal

    def as_fields(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "vat_amount": self.vat_amount,
            "discount_percent": self.discount_percent,
            "discount_amount": self.discount_amount,
            "total_amount": self.total_amount,
            "previous_balance": self.previous_balance,
            "gross_total": self.gross_total,
            "amount_paid": self.amount_paid,
            "credits_applied": self.credits_applied,
            "balance_remaining": self.balance_remaining,
        }


def balance_remaining(*, gross_total, amount_paid, credits_applied) -> Decimal:
    due = to_decimal(gross_total) - to_decimal(amount_paid) - to_decimal(credits_applied)
    return round2(max(Decimal("0"), due))


def _rate(line: LineAmounts, document_rate) -> Decimal:
    if line.vat_rate is None:
        return validate_vat_rate(document_rate)
    return validate_vat_rate(line.vat_rate)


def _finish(
    *,
    subtotal: Decimal,
    vat_amount: Decimal,
    discount_percent: Decimal,
    discount_amount: Decimal,
    previous_balance,
    amount_paid,
    credits_applied,
) -> Totals:
    total = round2(subtotal + vat_amount)
    prev = round2(previous_balance)
    gross = round2(total + prev)
    paid = round2(amount_paid)
    credits = round2(credits_applied)

    return Totals(
        subtotal=subtotal,
        vat_amount=vat_amount,
        discount_percent=round2(discount_percent),
        discount_amount=discount_amount,
        total_amount=total,
        previous_balance=prev,
        gross_total=gross,
        amount_paid=paid,
        credits_applied=credits,
        balance_remaining=balance_remaining(
            gross_total=gross, amount_paid=paid, credits_applied=credits
        ),
    )


def base_totals(
    lines: Iterable[LineAmounts],
    *,
    vat_percent=ZERO,
    previous_balance=ZERO,
    amount_paid=ZERO,
    credits_applied=ZERO,
) -> Totals:
    buckets: dict[Decimal, Decimal] = defaultdict(Decimal)
    for line in lines:
        buckets[_rate(line, vat_percent)] += line.base

    subtotal = round2(sum(buckets.values(), Decimal("0")))
    vat = round2(
        sum((base * rate / HUNDRED for rate, base in buckets.items()), Decimal("0"))
    )

    return _finish(
        subtotal=subtotal,
        vat_amount=vat,
        discount_percent=ZERO,
        discount_amount=ZERO,
        previous_balance=previous_balance,
        amount_paid=amount_paid,
        credits_applied=credits_applied,
    )


def proportional_discount_totals(
    lines: Iterable[LineAmounts],
    *,
    discount_percent,
    vat_percent=ZERO,
    previous_balance=ZERO,
    amount_paid=ZERO,
    credits_applied=ZERO,
) -> Totals:
    d = clamp_percent(discount_percent)
    lines = list(lines)

    if d == 0:
        return base_totals(
            lines,
            vat_percent=vat_percent,
            previous_balance=previous_balance,
            amount_paid=amount_paid,
            credits_applied=credits_applied,
        )

    keep = (HUNDRED - d) / HUNDRED

    raw_base = Decimal("0")
    base_after_sum = Decimal("0")
    vat_sum = Decimal("0")

    for line in lines:
        base = line.base
        base_after = round2(base * keep)
        raw_base += base
        base_after_sum += base_after
        vat_sum += base_after * _rate(line, vat_percent) / HUNDRED

    return _finish(
        subtotal=round2(base_after_sum),
        vat_amount=round2(vat_sum),
        discount_percent=d,
        discount_amount=round2(round2(raw_base) * d / HUNDRED),
        previous_balance=previous_balance,
        amount_paid=amount_paid,
        credits_applied=credits_applied,
    )


def compute_totals(
    lines: Iterable[LineAmounts],
    *,
    mode: RecomputeMode,
    discount_percent=ZERO,
    vat_percent=ZERO,
    previous_balance=ZERO,
    amount_paid=ZERO,
    credits_applied=ZERO,
) -> Totals:
    mode = RecomputeMode(mode)

    if mode == RecomputeMode.PROPORTIONAL_DISCOUNT:
        return proportional_discount_totals(
            lines,
            discount_percent=discount_percent,
            vat_percent=vat_percent,
            previous_balance=previous_balance,
            amount_paid=amount_paid,
            credits_applied=credits_applied,
        )

    return base_totals(
        lines,
        vat_percent=vat_percent,
        previous_balance=previous_balance,
        amount_paid=amount_paid,
        credits_applied=credits_applied,
    )
