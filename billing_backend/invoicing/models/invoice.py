# invoicing/models/invoice.py

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from customers.models import Customer


class Invoice(models.Model):
    """
    Customer invoice header.

    MONEY FIELDS (2 dp, written by invoice_service only):
    - subtotal / vat_amount / discount_amount / total_amount
    - gross_total = total_amount + previous_balance
    - amount_paid = sum of payments
    - credits_applied = sum of linked ISSUED/REFUNDED credit notes
    - balance_remaining = max(0, gross_total - amount_paid - credits_applied)

    STATUS:
    DRAFT -> ISSUED -> PARTIALLY_PAID -> PAID, VOID from any non-VOID state.
    Rules live in invoicing.services.lifecycle.
    """

    STATUS_DRAFT = "DRAFT"
    STATUS_ISSUED = "ISSUED"
    STATUS_PARTIALLY_PAID = "PARTIALLY_PAID"
    STATUS_PAID = "PAID"
    STATUS_VOID = "VOID"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ISSUED, "Issued"),
        (STATUS_PARTIALLY_PAID, "Partially paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_VOID, "Void"),
    ]

    # Statuses that count as receivables on statements and reports
    POSTED_STATUSES = (STATUS_ISSUED, STATUS_PARTIALLY_PAID, STATUS_PAID)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated invoice number",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    vat_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("15.00")
    )
    discount_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    previous_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    gross_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credits_applied = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    balance_remaining = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    sales_rep = models.CharField(max_length=120, blank=True, default="")
    sales_rep_phone = models.CharField(max_length=50, blank=True, default="")
    purchase_order_no = models.CharField(max_length=64, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        indexes = [
            models.Index(fields=["customer", "invoice_date"], name="invoice_customer_date_idx"),
            models.Index(fields=["status", "invoice_date"], name="invoice_status_date_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            prefix = timezone.now().strftime("INV%Y%m%d")
            self.invoice_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        super().save(*args, **kwargs)

    @property
    def is_editable(self) -> bool:
        return self.status in (self.STATUS_DRAFT, self.STATUS_ISSUED)

    def __str__(self):
        return f"{self.invoice_number} | {self.total_amount}"
