"""
PATH: invoicing/models/__init__.py

Invoicing models export surface.
"""

from .credit_note import CreditNote
from .credit_note_item import CreditNoteItem
from .invoice import Invoice
from .invoice_item import InvoiceItem
from .line import PricedLine, UnitOfMeasure
from .payment import Payment

__all__ = [
    "CreditNote",
    "CreditNoteItem",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "PricedLine",
    "UnitOfMeasure",
]
