# reports/api/views.py

"""
PATH: reports/api/views.py

PERIOD REPORTS

GET /api/reports/<key>/?from=YYYY-MM-DD&to=YYYY-MM-DD&granularity=DAY|MONTH|YEAR

Keys:
- invoices          net sales per period (+ accrual-matched collected)
- products          quantity + sales per product (per period with granularity,
                    otherwise over the whole window)
- customers         customers purchasing per period (+ top customers)
- sales-reps        net sales per rep (per period with granularity)
- customer-monthly  net sales per customer per period (default MONTH)
- vat               net VAT per period
- discount          invoice discount per period
- summary           KPI strip over the window
- customer-balances debit / credit / running balance per customer
                    (&customer=<id>&include_opening=true)
- aging             open invoices by age bucket (&customer=<id>&as_of=YYYY-MM-DD)

All money values are strings with 2 decimals.
"""

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from invoicing.api.errors import domain_error_response
from reports.api.params import (
    parse_as_of,
    parse_bool,
    parse_customer,
    parse_granularity,
    parse_window,
)
from reports.api.payload import jsonable
from reports.services import aging, customer_balances, periods
from reports.services.exceptions import ReportError, UnknownReport
from reports.services.periods import Granularity
from reports.services.snapshots import (
    load_customer_transactions,
    load_customers,
    load_open_invoices,
    load_period_documents,
)


def _explicit_granularity(query_params):
    if not (query_params.get("granularity") or "").strip():
        return None
    return parse_granularity(query_params)


# ======================================================
# REPORT BUILDERS
# ======================================================


def _invoices_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_periods(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            payments=docs.payments,
            granularity=parse_granularity(qp),
            date_from=date_from,
            date_to=date_to,
        )
    }


def _products_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_by_product(
            invoice_lines=docs.invoice_lines,
            credit_lines=docs.credit_lines,
            granularity=_explicit_granularity(qp),
        )
    }


def _customers_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.customer_activity(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            customers=docs.customers,
            granularity=parse_granularity(qp),
        )
    }


def _sales_reps_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_by_sales_rep(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            granularity=_explicit_granularity(qp),
        )
    }


def _customer_monthly_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_by_customer(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            customers=docs.customers,
            granularity=parse_granularity(qp, default=Granularity.MONTH),
        )
    }


def _vat_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_vat(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            granularity=parse_granularity(qp),
        )
    }


def _discount_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "rows": periods.aggregate_discount(
            invoices=docs.invoices,
            granularity=parse_granularity(qp),
        )
    }


def _summary_report(qp):
    date_from, date_to = parse_window(qp)
    docs = load_period_documents(date_from=date_from, date_to=date_to)
    return {
        "summary": periods.summarize_period(
            invoices=docs.invoices,
            credit_notes=docs.credit_notes,
            payments=docs.payments,
            invoice_lines=docs.invoice_lines,
            credit_lines=docs.credit_lines,
        )
    }


def _customer_balances_report(qp):
    date_from, date_to = parse_window(qp)
    txns = load_customer_transactions(
        date_from=date_from,
        date_to=date_to,
        customer_id=parse_customer(qp),
    )
    rows = customer_balances.customer_balances(
        invoices=txns.invoices,
        payments=txns.payments,
        credit_notes=txns.credit_notes,
        customers=txns.customers,
        granularity=parse_granularity(qp, default=Granularity.MONTH),
        include_opening=parse_bool(qp, "include_opening"),
    )
    return {"rows": rows, "totals": customer_balances.balance_totals(rows)}


def _aging_report(qp):
    invoices = load_open_invoices(customer_id=parse_customer(qp))
    report = aging.build_aging(
        invoices=invoices,
        as_of=parse_as_of(qp),
        customers=load_customers(i.customer_id for i in invoices),
    )
    return {
        "as_of": report.as_of,
        "rows": report.rows,
        "buckets": report.buckets,
        "total": report.total,
    }


REPORTS = {
    "invoices": _invoices_report,
    "products": _products_report,
    "customers": _customers_report,
    "sales-reps": _sales_reps_report,
    "customer-monthly": _customer_monthly_report,
    "vat": _vat_report,
    "discount": _discount_report,
    "summary": _summary_report,
    "customer-balances": _customer_balances_report,
    "aging": _aging_report,
}


# ======================================================
# VIEW
# ======================================================


class ReportView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(name="from", type=OpenApiTypes.DATE, required=False),
            OpenApiParameter(name="to", type=OpenApiTypes.DATE, required=False),
            OpenApiParameter(name="granularity", type=str, required=False),
            OpenApiParameter(name="customer", type=OpenApiTypes.UUID, required=False),
            OpenApiParameter(name="include_opening", type=bool, required=False),
            OpenApiParameter(name="as_of", type=OpenApiTypes.DATE, required=False),
        ],
        description="Period reports. See module docstring for keys.",
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request, key: str):
        try:
            builder = REPORTS.get(key)
            if builder is None:
                raise UnknownReport(
                    f"Unknown report '{key}'. Use one of: {', '.join(sorted(REPORTS))}"
                )
            payload = builder(request.query_params)
        except ReportError as exc:
            return domain_error_response(exc)

        return Response({"report": key, **jsonable(payload)})
