# invoicing/models/credit_note_item.py

from django.db import models

from invoicing.models.credit_note import CreditNote
from invoicing.models.line import PricedLine


class CreditNoteItem(PricedLine):
    credit_note = models.ForeignKey(
        CreditNote,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(PricedLine.Meta):
        indexes = [
            models.Index(fields=["credit_note", "created_at"], name="cn_item_cn_idx"),
        ]

    def __str__(self):
        return f"{self.label} x {self.quantity} ({self.credit_note.credit_note_number})"
