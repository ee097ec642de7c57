# reports/services/periods.py

"""
PERIOD AGGREGATION

Net sales per period and per dimension. Every rollup follows one merge rule:
invoices add, credit notes subtract (credit notes never carry discount).

Periods:
- DAY   -> YYYY-MM-DD
- MONTH -> YYYY-MM
- YEAR  -> YYYY

Collected (accrual-matched):
- a payment dated <= date_to counts in the period of ITS INVOICE's date,
  and only for invoices dated inside the window

Inputs are the posted snapshots from reports.services.snapshots.
"""

import enum
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from invoicing.services.money import round2, round3

ZERO = Decimal("0")
NO_REP = "—"
RETURNED_ITEM = "Returned item"
TOP_CUSTOMERS = 6


class Granularity(str, enum.Enum):
    DAY = "DAY"
    MONTH = "MONTH"
    YEAR = "YEAR"


def period_key(d: date, granularity: Granularity) -> str:
    granularity = Granularity(granularity)
    if granularity == Granularity.YEAR:
        return f"{d.year:04d}"
    if granularity == Granularity.MONTH:
        return f"{d.year:04d}-{d.month:02d}"
    return d.isoformat()


def rep_label(value) -> str:
    return (value or "").strip() or NO_REP


# ============================================================
# RESULT ROWS
# ============================================================


@dataclass(frozen=True)
class PeriodBucket:
    key: str
    invoices: int
    credit_notes: int
    unique_customers: int
    gross_total: Decimal
    subtotal: Decimal
    vat: Decimal
    discount: Decimal
    total: Decimal
    collected: Decimal

    @property
    def net_after_payments(self) -> Decimal:
        return round2(self.total - self.collected)


@dataclass(frozen=True)
class DimensionRollup:
    """
    Net totals for one dimension value (sales rep or customer),
    optionally within one period (period is None for whole-window rollups).
    """

    period: str | None
    key: object
    label: str
    secondary: str
    invoices: int
    credit_notes: int
    total: Decimal
    vat: Decimal
    discount: Decimal


@dataclass(frozen=True)
class ProductRollup:
    period: str | None
    product_id: object
    sku: str
    product: str
    uom: str
    quantity: Decimal
    sales: Decimal


@dataclass(frozen=True)
class TopCustomer:
    customer_id: object
    customer: str
    secondary: str
    amount: Decimal


@dataclass(frozen=True)
class CustomerActivity:
    key: str
    unique_customers: int
    invoices: int
    credit_notes: int
    total: Decimal
    top_customers: tuple


@dataclass(frozen=True)
class PeriodAmount:
    key: str
    amount: Decimal


@dataclass(frozen=True)
class PeriodSummary:
    revenue: Decimal
    gross: Decimal
    vat: Decimal
    discount: Decimal
    invoices: int
    credit_notes: int
    collected: Decimal
    net_after_payments: Decimal
    quantity_sold: Decimal
    unique_customers: int


# ============================================================
# ACCUMULATORS
# ============================================================


@dataclass
class _Totals:
    invoices: int = 0
    credit_notes: int = 0
    gross_total: Decimal = ZERO
    subtotal: Decimal = ZERO
    vat: Decimal = ZERO
    discount: Decimal = ZERO
    total: Decimal = ZERO
    collected: Decimal = ZERO
    customers: set = field(default_factory=set)
    by_customer: dict = field(default_factory=lambda: defaultdict(Decimal))

    def add_invoice(self, inv):
        self.invoices += 1
        self.gross_total += inv.gross_total
        self.subtotal += inv.subtotal
        self.vat += inv.vat_amount
        self.discount += inv.discount_amount
        self.total += inv.total_amount
        self.customers.add(inv.customer_id)
        self.by_customer[inv.customer_id] += inv.total_amount

    def add_credit_note(self, cn):
        self.credit_notes += 1
        self.gross_total -= cn.subtotal + cn.vat_amount
        self.subtotal -= cn.subtotal
        self.vat -= cn.vat_amount
        self.total -= cn.total_amount
        self.customers.add(cn.customer_id)
        self.by_customer[cn.customer_id] -= cn.total_amount


def _customer_names(customers: dict | None, customer_id) -> tuple[str, str]:
    c = (customers or {}).get(customer_id)
    if c is None:
        return f"Customer {customer_id}", ""
    return c.primary_name, c.secondary_name


def _in_window(d: date, date_from: date | None, date_to: date | None) -> bool:
    if date_from is not None and d < date_from:
        return False
    if date_to is not None and d > date_to:
        return False
    return True


# ============================================================
# PERIOD BUCKETS
# ============================================================


def aggregate_periods(
    *,
    invoices: Iterable,
    credit_notes: Iterable,
    payments: Iterable = (),
    granularity: Granularity = Granularity.DAY,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[PeriodBucket]:
    acc: dict[str, _Totals] = defaultdict(_Totals)
    invoice_dates = {}

    for inv in invoices:
        acc[period_key(inv.date, granularity)].add_invoice(inv)
        invoice_dates[inv.id] = inv.date

    for cn in credit_notes:
        acc[period_key(cn.date, granularity)].add_credit_note(cn)

    for p in payments:
        inv_date = invoice_dates.get(p.invoice_id)
        if inv_date is None or not _in_window(inv_date, date_from, date_to):
            continue
        if date_to is not None and p.date > date_to:
            continue
        acc[period_key(inv_date, granularity)].collected += p.amount

    return [
        PeriodBucket(
            key=key,
            invoices=t.invoices,
            credit_notes=t.credit_notes,
            unique_customers=len(t.customers),
            gross_total=round2(t.gross_total),
            subtotal=round2(t.subtotal),
            vat=round2(t.vat),
            discount=round2(t.discount),
            total=round2(t.total),
            collected=round2(t.collected),
        )
        for key, t in sorted(acc.items())
    ]


def aggregate_vat(*, invoices: Iterable, credit_notes: Iterable, granularity) -> list[PeriodAmount]:
    acc = defaultdict(Decimal)
    for inv in invoices:
        acc[period_key(inv.date, granularity)] += inv.vat_amount
    for cn in credit_notes:
        acc[period_key(cn.date, granularity)] -= cn.vat_amount
    return [PeriodAmount(key=k, amount=round2(v)) for k, v in sorted(acc.items())]


def aggregate_discount(*, invoices: Iterable, granularity) -> list[PeriodAmount]:
    acc = defaultdict(Decimal)
    for inv in invoices:
        acc[period_key(inv.date, granularity)] += inv.discount_amount
    return [PeriodAmount(key=k, amount=round2(v)) for k, v in sorted(acc.items())]


# ============================================================
# DIMENSION ROLLUPS
# ============================================================


def _rollups(acc: dict, labels: dict) -> list[DimensionRollup]:
    rows = []
    for (period, key), t in acc.items():
        label, secondary = labels[key]
        rows.append(
            DimensionRollup(
                period=period,
                key=key,
                label=label,
                secondary=secondary,
                invoices=t.invoices,
                credit_notes=t.credit_notes,
                total=round2(t.total),
                vat=round2(t.vat),
                discount=round2(t.discount),
            )
        )
    rows.sort(key=lambda r: (r.period or "", -r.total, r.label))
    return rows


def aggregate_by_sales_rep(
    *,
    invoices: Iterable,
    credit_notes: Iterable,
    granularity: Granularity | None = None,
) -> list[DimensionRollup]:
    """
    Net sales per sales rep (label "—" when blank), per period when a
    granularity is given, otherwise over the whole window. `secondary` carries
    the first non-blank phone seen for that rep.
    """
    acc: dict = defaultdict(_Totals)
    labels = {}

    def _key(doc):
        period = period_key(doc.date, granularity) if granularity else None
        rep = rep_label(doc.sales_rep)
        labels.setdefault(rep, [rep, ""])
        if not labels[rep][1] and doc.sales_rep_phone:
            labels[rep][1] = doc.sales_rep_phone
        return acc[(period, rep)]

    for inv in invoices:
        _key(inv).add_invoice(inv)
    for cn in credit_notes:
        _key(cn).add_credit_note(cn)

    return _rollups(acc, {k: tuple(v) for k, v in labels.items()})


def aggregate_by_customer(
    *,
    invoices: Iterable,
    credit_notes: Iterable,
    customers: dict | None = None,
    granularity: Granularity | None = Granularity.MONTH,
) -> list[DimensionRollup]:
    acc: dict = defaultdict(_Totals)
    labels = {}

    for inv in invoices:
        period = period_key(inv.date, granularity) if granularity else None
        acc[(period, inv.customer_id)].add_invoice(inv)
        labels[inv.customer_id] = _customer_names(customers, inv.customer_id)

    for cn in credit_notes:
        period = period_key(cn.date, granularity) if granularity else None
        acc[(period, cn.customer_id)].add_credit_note(cn)
        labels[cn.customer_id] = _customer_names(customers, cn.customer_id)

    return _rollups(acc, labels)


def aggregate_by_product(
    *,
    invoice_lines: Iterable,
    credit_lines: Iterable,
    granularity: Granularity | None = None,
) -> list[ProductRollup]:
    """
    Quantity and sales per product; credit lines subtract.

    Per period: credit lines without a product are kept as "Returned item".
    Whole window: credit lines without a product are skipped.
    """
    qty = defaultdict(Decimal)
    sales = defaultdict(Decimal)
    info = {}

    def _describe(line, product_id):
        name = line.product_name or line.description
        if not name:
            name = f"Product {product_id}" if product_id else RETURNED_ITEM
        sku = line.sku or (str(product_id) if product_id else NO_REP)
        return sku, name, line.uom or NO_REP

    for line in invoice_lines:
        key = (period_key(line.date, granularity) if granularity else None, line.product_id)
        info.setdefault(key, _describe(line, line.product_id))
        qty[key] += line.quantity
        sales[key] += line.line_total

    for line in credit_lines:
        if not line.product_id and not granularity:
            continue
        key = (period_key(line.date, granularity) if granularity else None, line.product_id)
        info.setdefault(key, _describe(line, line.product_id))
        qty[key] -= line.quantity
        sales[key] -= line.line_total

    rows = [
        ProductRollup(
            period=period,
            product_id=product_id,
            sku=info[(period, product_id)][0],
            product=info[(period, product_id)][1],
            uom=info[(period, product_id)][2],
            quantity=round3(qty[(period, product_id)]),
            sales=round2(sales[(period, product_id)]),
        )
        for (period, product_id) in info
    ]

    if granularity:
        rows.sort(key=lambda r: (r.period, -abs(r.sales)))
    else:
        rows.sort(key=lambda r: -r.sales)
    return rows


# ============================================================
# CUSTOMER ACTIVITY
# ============================================================


def customer_activity(
    *,
    invoices: Iterable,
    credit_notes: Iterable,
    customers: dict | None = None,
    granularity: Granularity = Granularity.DAY,
) -> list[CustomerActivity]:
    acc: dict[str, _Totals] = defaultdict(_Totals)

    for inv in invoices:
        acc[period_key(inv.date, granularity)].add_invoice(inv)
    for cn in credit_notes:
        acc[period_key(cn.date, granularity)].add_credit_note(cn)

    rows = []
    for key, t in sorted(acc.items()):
        ranked = sorted(t.by_customer.items(), key=lambda kv: -abs(kv[1]))[:TOP_CUSTOMERS]
        top = []
        for customer_id, amount in ranked:
            name, secondary = _customer_names(customers, customer_id)
            top.append(
                TopCustomer(
                    customer_id=customer_id,
                    customer=name,
                    secondary=secondary,
                    amount=round2(amount),
                )
            )
        rows.append(
            CustomerActivity(
                key=key,
                unique_customers=len(t.customers),
                invoices=t.invoices,
                credit_notes=t.credit_notes,
                total=round2(t.total),
                top_customers=tuple(top),
            )
        )
    return rows


# ============================================================
# KPI STRIP
# ============================================================


def summarize_period(
    *,
    invoices: Iterable,
    credit_notes: Iterable,
    payments: Iterable = (),
    invoice_lines: Iterable = (),
    credit_lines: Iterable = (),
) -> PeriodSummary:
    t = _Totals()
    for inv in invoices:
        t.add_invoice(inv)
    for cn in credit_notes:
        t.add_credit_note(cn)

    collected = sum((p.amount for p in payments), ZERO)
    quantity = sum((line.quantity for line in invoice_lines), ZERO) - sum(
        (line.quantity for line in credit_lines), ZERO
    )

    return PeriodSummary(
        revenue=round2(t.total),
        gross=round2(t.gross_total),
        vat=round2(t.vat),
        discount=round2(t.discount),
        invoices=t.invoices,
        credit_notes=t.credit_notes,
        collected=round2(collected),
        net_after_payments=round2(t.total - collected),
        quantity_sold=round3(quantity),
        unique_customers=len(t.customers),
    )
