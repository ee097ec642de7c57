# invoicing/migrations/0001_initial.py

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


def _money(**kwargs):
    return models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00"), **kwargs
    )


def _line_fields():
    return [
        (
            "id",
            models.UUIDField(
                primary_key=True, default=uuid.uuid4, editable=False, serialize=False
            ),
        ),
        ("description", models.CharField(max_length=255, blank=True, default="")),
        (
            "uom",
            models.CharField(
                max_length=8,
                choices=[
                    ("BOX", "Box"),
                    ("PCS", "Pieces"),
                    ("KG", "Kilogram"),
                    ("G", "Gram"),
                    ("BAG", "Bag"),
                ],
                default="BOX",
            ),
        ),
        ("entered_qty", models.DecimalField(max_digits=12, decimal_places=3)),
        (
            "factor",
            models.DecimalField(
                max_digits=10,
                decimal_places=3,
                default=Decimal("1.000"),
                help_text="Units per box or kg per bag used for conversion.",
            ),
        ),
        (
            "quantity",
            models.DecimalField(
                max_digits=12,
                decimal_places=3,
                help_text="Canonical quantity (entered_qty x factor).",
            ),
        ),
        (
            "unit_price_excl_vat",
            models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
        ),
        (
            "vat_rate",
            models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True),
        ),
        (
            "unit_vat",
            models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
        ),
        (
            "unit_price_incl_vat",
            models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
        ),
        ("line_total", _money()),
        ("created_at", models.DateTimeField(auto_now_add=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                (
                    "invoice_number",
                    models.CharField(
                        max_length=64,
                        unique=True,
                        blank=True,
                        help_text="System-generated invoice number",
                    ),
                ),
                ("invoice_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(null=True, blank=True)),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("DRAFT", "Draft"),
                            ("ISSUED", "Issued"),
                            ("PARTIALLY_PAID", "Partially paid"),
                            ("PAID", "Paid"),
                            ("VOID", "Void"),
                        ],
                        default="DRAFT",
                    ),
                ),
                (
                    "vat_percent",
                    models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("15.00")),
                ),
                (
                    "discount_percent",
                    models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00")),
                ),
                ("subtotal", _money()),
                ("vat_amount", _money()),
                ("discount_amount", _money()),
                ("total_amount", _money()),
                ("previous_balance", _money()),
                ("gross_total", _money()),
                ("amount_paid", _money()),
                ("credits_applied", _money()),
                ("balance_remaining", _money()),
                ("sales_rep", models.CharField(max_length=120, blank=True, default="")),
                ("sales_rep_phone", models.CharField(max_length=50, blank=True, default="")),
                ("purchase_order_no", models.CharField(max_length=64, blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["-invoice_date", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["customer", "invoice_date"], name="invoice_customer_date_idx"
                    ),
                    models.Index(fields=["status", "invoice_date"], name="invoice_status_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=_line_fields()
            + [
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="%(class)s_lines",
                        null=True,
                        blank=True,
                        to="products.product",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="invoicing.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["invoice", "created_at"], name="invoice_item_inv_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                ("payment_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", models.DecimalField(max_digits=14, decimal_places=2)),
                ("method", models.CharField(max_length=32, default="Cash")),
                ("reference", models.CharField(max_length=120, blank=True, default="")),
                ("notes", models.CharField(max_length=255, blank=True, default="")),
                ("is_auto", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="invoicing.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["payment_date", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["invoice", "payment_date"], name="payment_invoice_date_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=Decimal("0.00")),
                        name="invoice_payment_amount_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditNote",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True, default=uuid.uuid4, editable=False, serialize=False
                    ),
                ),
                ("credit_note_number", models.CharField(max_length=64, unique=True, blank=True)),
                (
                    "credit_note_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ISSUED", "Issued"),
                            ("PENDING", "Pending"),
                            ("REFUNDED", "Refunded"),
                            ("VOID", "Void"),
                        ],
                        default="ISSUED",
                    ),
                ),
                ("reason", models.CharField(max_length=255, blank=True, default="")),
                (
                    "vat_percent",
                    models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("15.00")),
                ),
                ("subtotal", _money()),
                ("vat_amount", _money()),
                ("total_amount", _money()),
                ("sales_rep", models.CharField(max_length=120, blank=True, default="")),
                ("sales_rep_phone", models.CharField(max_length=50, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_notes",
                        to="customers.customer",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_notes",
                        null=True,
                        blank=True,
                        to="invoicing.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["-credit_note_date", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["customer", "credit_note_date"], name="cn_customer_date_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditNoteItem",
            fields=_line_fields()
            + [
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="%(class)s_lines",
                        null=True,
                        blank=True,
                        to="products.product",
                    ),
                ),
                (
                    "credit_note",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="invoicing.creditnote",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["credit_note", "created_at"], name="cn_item_cn_idx"),
                ],
            },
        ),
    ]
