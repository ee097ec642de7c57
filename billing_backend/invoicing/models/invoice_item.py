# invoicing/models/invoice_item.py

from django.db import models

from invoicing.models.invoice import Invoice
from invoicing.models.line import PricedLine


class InvoiceItem(PricedLine):
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(PricedLine.Meta):
        indexes = [
            models.Index(fields=["invoice", "created_at"], name="invoice_item_inv_idx"),
        ]

    def __str__(self):
        return f"{self.label} x {self.quantity} ({self.invoice.invoice_number})"
