# invoicing/api/errors.py

"""
API ERROR NORMALIZATION

Canonical error body for every billing endpoint:

    {"error": {"code": "...", "message": "..."}}
"""

from rest_framework import status
from rest_framework.response import Response

from invoicing.services.exceptions import (
    CreditNoteError,
    InvalidInvoiceStateError,
    InvalidQuantity,
    InvalidVatRate,
    InvoicingError,
    MissingPrice,
    MissingProduct,
    PaymentError,
)
from reports.services.exceptions import (
    InvalidDateRange,
    InvalidReportParameter,
    ReportError,
    UnknownReport,
)

# most specific first
ERROR_CODES = (
    (InvalidQuantity, "INVALID_QUANTITY"),
    (MissingProduct, "MISSING_PRODUCT"),
    (MissingPrice, "MISSING_PRICE"),
    (InvalidVatRate, "INVALID_VAT_RATE"),
    (InvalidInvoiceStateError, "INVALID_INVOICE_STATE"),
    (PaymentError, "INVALID_PAYMENT"),
    (CreditNoteError, "INVALID_CREDIT_NOTE_STATE"),
    (InvalidDateRange, "INVALID_DATE_RANGE"),
    (UnknownReport, "UNKNOWN_REPORT"),
    (InvalidReportParameter, "INVALID_REPORT_PARAMETER"),
)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def domain_error_response(exc: Exception):
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return error_response(
                code=code,
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

    if isinstance(exc, InvoicingError):
        code = "INVOICING_ERROR"
    elif isinstance(exc, ReportError):
        code = "REPORT_ERROR"
    else:
        raise exc

    return error_response(code=code, message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)


def not_found(message: str):
    return error_response(code="NOT_FOUND", message=message, http_status=status.HTTP_404_NOT_FOUND)
