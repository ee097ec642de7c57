# invoicing/services/exceptions.py

"""
INVOICING DOMAIN ERRORS

Raised by the invoicing services, translated to the canonical API error
body by invoicing.api.errors.
"""


class InvoicingError(Exception):
    """Base error for invoicing services"""


class InvalidQuantity(InvoicingError):
    pass


class MissingProduct(InvoicingError):
    pass


class MissingPrice(InvoicingError):
    pass


class InvalidVatRate(InvoicingError):
    pass


class InvalidInvoiceStateError(InvoicingError):
    pass


class PaymentError(InvoicingError):
    pass


class CreditNoteError(InvoicingError):
    pass
