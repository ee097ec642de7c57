# invoicing/models/credit_note.py

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from customers.models import Customer
from invoicing.models.invoice import Invoice


class CreditNote(models.Model):
    """
    Credit note issued to a customer (returns, price corrections).

    - Totals are base totals of the lines (credit notes never carry discount)
    - Optional link to the invoice it reduces; ISSUED/REFUNDED credit notes
      count in that invoice's credits_applied
    """

    STATUS_ISSUED = "ISSUED"
    STATUS_PENDING = "PENDING"
    STATUS_REFUNDED = "REFUNDED"
    STATUS_VOID = "VOID"

    STATUSES = [
        (STATUS_ISSUED, "Issued"),
        (STATUS_PENDING, "Pending"),
        (STATUS_REFUNDED, "Refunded"),
        (STATUS_VOID, "Void"),
    ]

    # Statuses that reduce the customer's balance
    POSTED_STATUSES = (STATUS_ISSUED, STATUS_REFUNDED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    credit_note_number = models.CharField(max_length=64, unique=True, blank=True)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="credit_notes",
    )
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="credit_notes",
        null=True,
        blank=True,
    )

    credit_note_date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_ISSUED)
    reason = models.CharField(max_length=255, blank=True, default="")

    vat_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("15.00")
    )
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    sales_rep = models.CharField(max_length=120, blank=True, default="")
    sales_rep_phone = models.CharField(max_length=50, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-credit_note_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["customer", "credit_note_date"], name="cn_customer_date_idx"
            ),
        ]

    def save(self, *args, **kwargs):
        if not self.credit_note_number:
            prefix = timezone.now().strftime("CN%Y%m%d")
            self.credit_note_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.credit_note_number} | {self.total_amount}"
