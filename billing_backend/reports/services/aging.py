# reports/services/aging.py

"""
RECEIVABLES AGING

Open invoices (not DRAFT / VOID, balance_remaining > 0) aged in days from
invoice date to as_of, bucketed 0-30, 31-60, 61-90, 90+.
Rows are ordered oldest first.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from invoicing.models import Invoice
from invoicing.services.money import round2

OPEN_EPSILON = Decimal("0.00001")

BUCKET_0_30 = "0-30"
BUCKET_31_60 = "31-60"
BUCKET_61_90 = "61-90"
BUCKET_90_PLUS = "90+"

BUCKETS = (BUCKET_0_30, BUCKET_31_60, BUCKET_61_90, BUCKET_90_PLUS)


@dataclass(frozen=True)
class AgingRow:
    invoice_id: object
    invoice_number: str
    customer_id: object
    customer: str
    invoice_date: date
    age_days: int
    bucket: str
    balance_remaining: Decimal


@dataclass(frozen=True)
class AgingReport:
    as_of: date
    rows: tuple
    buckets: dict
    total: Decimal


def bucket_for(age_days: int) -> str:
    if age_days <= 30:
        return BUCKET_0_30
    if age_days <= 60:
        return BUCKET_31_60
    if age_days <= 90:
        return BUCKET_61_90
    return BUCKET_90_PLUS


def build_aging(*, invoices: Iterable, as_of: date, customers: dict | None = None) -> AgingReport:
    rows = []
    for inv in invoices:
        if inv.status in (Invoice.STATUS_DRAFT, Invoice.STATUS_VOID):
            continue
        if inv.balance_remaining <= OPEN_EPSILON:
            continue

        age = max(0, (as_of - inv.date).days)
        c = (customers or {}).get(inv.customer_id)
        rows.append(
            AgingRow(
                invoice_id=inv.id,
                invoice_number=inv.number,
                customer_id=inv.customer_id,
                customer=c.primary_name if c else f"Customer {inv.customer_id}",
                invoice_date=inv.date,
                age_days=age,
                bucket=bucket_for(age),
                balance_remaining=round2(inv.balance_remaining),
            )
        )

    rows.sort(key=lambda r: (-r.age_days, r.invoice_number))

    buckets = {b: Decimal("0.00") for b in BUCKETS}
    for r in rows:
        buckets[r.bucket] += r.balance_remaining

    return AgingReport(
        as_of=as_of,
        rows=tuple(rows),
        buckets={k: round2(v) for k, v in buckets.items()},
        total=round2(sum(buckets.values(), Decimal("0"))),
    )
