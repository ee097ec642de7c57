# reports/api/params.py

"""
Query parameter parsing shared by the report endpoints.
"""

import uuid
from datetime import datetime

from django.utils import timezone

from reports.services.exceptions import (
    InvalidDateRange,
    InvalidReportParameter,
    validate_range,
)
from reports.services.periods import Granularity

GRANULARITY_ALIASES = {
    "DAY": Granularity.DAY,
    "DAILY": Granularity.DAY,
    "MONTH": Granularity.MONTH,
    "MONTHLY": Granularity.MONTH,
    "YEAR": Granularity.YEAR,
    "YEARLY": Granularity.YEAR,
}


def parse_date(value: str | None, *, name: str):
    """
    Accepts YYYY-MM-DD. Returns None when absent.
    """
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateRange(f"Invalid '{name}' date {value!r}. Use YYYY-MM-DD.") from exc


def parse_window(query_params):
    date_from = parse_date(query_params.get("from"), name="from")
    date_to = parse_date(query_params.get("to"), name="to")
    validate_range(date_from, date_to)
    return date_from, date_to


def parse_as_of(query_params):
    return parse_date(query_params.get("as_of"), name="as_of") or timezone.localdate()


def parse_granularity(query_params, default: Granularity = Granularity.DAY) -> Granularity:
    raw = (query_params.get("granularity") or "").strip().upper()
    if not raw:
        return default
    try:
        return GRANULARITY_ALIASES[raw]
    except KeyError as exc:
        raise InvalidReportParameter(
            f"Invalid granularity {raw!r}. Use DAY, MONTH or YEAR."
        ) from exc


def parse_bool(query_params, name: str) -> bool:
    return (query_params.get(name) or "").strip().lower() in ("1", "true", "yes")


def parse_customer(query_params):
    raw = (query_params.get("customer") or "").strip()
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError as exc:
        raise InvalidReportParameter(f"Invalid customer id {raw!r}") from exc
