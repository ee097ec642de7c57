# invoicing/models/payment.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from invoicing.models.invoice import Invoice


class Payment(models.Model):
    """
    Money received against an invoice.

    Append-only: rows are never edited or deleted by the services.
    is_auto marks the settling payment inserted by mark_invoice_paid.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=32, default="Cash")
    reference = models.CharField(max_length=120, blank=True, default="")
    notes = models.CharField(max_length=255, blank=True, default="")
    is_auto = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["payment_date", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="invoice_payment_amount_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["invoice", "payment_date"], name="payment_invoice_date_idx"),
        ]

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be > 0"})

    def save(self, *args, **kwargs):
        self.method = (self.method or "Cash").strip() or "Cash"
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.amount}"
