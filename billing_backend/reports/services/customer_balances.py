# reports/services/customer_balances.py

"""
CUSTOMER BALANCES REPORT

Per (period, customer):
- debit  = invoice totals
- credit = payments + credit notes (payments by payment date)
- running_balance per customer, walked in period order, optionally seeded
  with the customer's carried-forward opening_balance (shown on the
  customer's first row only)

Rows are returned latest period first, then by customer code and name.
"""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from invoicing.services.money import round2
from reports.services.periods import Granularity, period_key

ZERO = Decimal("0")


@dataclass(frozen=True)
class CustomerBalanceRow:
    period: str
    customer_id: object
    customer_code: str
    customer_name: str
    client_name: str
    opening: Decimal
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


@dataclass(frozen=True)
class CustomerBalanceTotals:
    opening: Decimal
    debit: Decimal
    credit: Decimal
    ending: Decimal


def customer_balances(
    *,
    invoices: Iterable,
    payments: Iterable,
    credit_notes: Iterable,
    customers: dict,
    granularity: Granularity = Granularity.MONTH,
    include_opening: bool = False,
) -> list[CustomerBalanceRow]:
    debit = defaultdict(Decimal)
    credit = defaultdict(Decimal)

    for inv in invoices:
        debit[(inv.customer_id, period_key(inv.date, granularity))] += inv.total_amount

    for p in payments:
        credit[(p.customer_id, period_key(p.date, granularity))] += p.amount

    for cn in credit_notes:
        credit[(cn.customer_id, period_key(cn.date, granularity))] += cn.total_amount

    def _sort_name(customer_id):
        c = customers.get(customer_id)
        return (c.name if c else "", str(customer_id))

    keys = sorted(set(debit) | set(credit), key=lambda k: (_sort_name(k[0]), k[1]))

    rows = []
    running: dict = {}
    for customer_id, period in keys:
        c = customers.get(customer_id)
        opening = ZERO
        if customer_id not in running:
            opening = round2(c.opening_balance) if (include_opening and c) else ZERO
            running[customer_id] = opening

        d = debit[(customer_id, period)]
        cr = credit[(customer_id, period)]
        running[customer_id] += d - cr

        rows.append(
            CustomerBalanceRow(
                period=period,
                customer_id=customer_id,
                customer_code=c.customer_code if c else "",
                customer_name=c.name if c else f"Customer {customer_id}",
                client_name=c.client_name if c else "",
                opening=opening,
                debit=round2(d),
                credit=round2(cr),
                running_balance=round2(running[customer_id]),
            )
        )

    # latest period first
    rows.sort(key=lambda r: (r.customer_code, r.customer_name))
    rows.sort(key=lambda r: r.period, reverse=True)
    return rows


def balance_totals(rows: Iterable[CustomerBalanceRow]) -> CustomerBalanceTotals:
    rows = list(rows)
    last_by_customer = {}

    # ending = sum of each customer's latest running balance
    for r in sorted(rows, key=lambda r: r.period):
        last_by_customer[r.customer_id] = r.running_balance

    return CustomerBalanceTotals(
        opening=round2(sum((r.opening for r in rows), ZERO)),
        debit=round2(sum((r.debit for r in rows), ZERO)),
        credit=round2(sum((r.credit for r in rows), ZERO)),
        ending=round2(sum(last_by_customer.values(), ZERO)),
    )
