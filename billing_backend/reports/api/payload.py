# reports/api/payload.py

"""
JSON-safe rendering of report dataclasses.

- Decimal -> string (money already rounded to 2 dp, quantities to 3 dp)
- date -> YYYY-MM-DD
- UUID -> string
"""

import dataclasses
import uuid
from datetime import date
from decimal import Decimal

from reports.services.periods import PeriodBucket
from reports.services.statement import Statement


def jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, PeriodBucket):
        out = {f.name: jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        out["net_after_payments"] = jsonable(value.net_after_payments)
        return out
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(jsonable(k)): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def statement_payload(statement: Statement) -> dict:
    return {
        "customer_id": jsonable(statement.customer_id),
        "from": jsonable(statement.date_from),
        "to": jsonable(statement.date_to),
        "opening_balance": jsonable(statement.opening_balance),
        "closing_balance": jsonable(statement.closing_balance),
        "summary": jsonable(statement.summary),
        "lines": jsonable(statement.lines),
    }
