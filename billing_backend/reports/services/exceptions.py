# reports/services/exceptions.py


class ReportError(Exception):
    """Base error for read-side report services"""


class InvalidDateRange(ReportError):
    pass


class UnknownReport(ReportError):
    pass


class InvalidReportParameter(ReportError):
    pass


def validate_range(date_from, date_to):
    if date_from is None or date_to is None:
        raise InvalidDateRange("Both 'from' and 'to' dates are required")
    if date_from > date_to:
        raise InvalidDateRange(f"'from' ({date_from}) is after 'to' ({date_to})")
