# customers/models.py

import uuid
from decimal import Decimal

from django.db import models


class Customer(models.Model):
    """
    Customer master (accounts receivable party).

    opening_balance:
    - balance carried forward from before the system went live
    - used only when a report asks for it (customer balances with
      include_opening); statements are built from documents alone
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer_code = models.CharField(max_length=64, blank=True, default="")
    name = models.CharField(max_length=200)
    client_name = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Contact person at the customer",
    )
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    opening_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="customer_name_idx"),
            models.Index(fields=["customer_code"], name="customer_code_idx"),
        ]

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.customer_code = (self.customer_code or "").strip()
        return super().save(*args, **kwargs)

    @property
    def label(self) -> str:
        return self.name or self.client_name or str(self.id)

    def __str__(self):
        if self.customer_code:
            return f"{self.customer_code} {self.name}"
        return self.name
