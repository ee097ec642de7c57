# invoicing/api/serializers.py

from rest_framework import serializers

from invoicing.models import (
    CreditNote,
    CreditNoteItem,
    Invoice,
    InvoiceItem,
    Payment,
    UnitOfMeasure,
)
from invoicing.services.totals import RecomputeMode


# ============================================================
# READ
# ============================================================

LINE_FIELDS = [
    "id",
    "product",
    "product_name",
    "description",
    "uom",
    "entered_qty",
    "factor",
    "quantity",
    "unit_price_excl_vat",
    "vat_rate",
    "unit_vat",
    "unit_price_incl_vat",
    "line_total",
]


class InvoiceItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True, default="")

    class Meta:
        model = InvoiceItem
        fields = LINE_FIELDS
        read_only_fields = LINE_FIELDS


class CreditNoteItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True, default="")

    class Meta:
        model = CreditNoteItem
        fields = LINE_FIELDS
        read_only_fields = LINE_FIELDS


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "invoice",
            "invoice_number",
            "payment_date",
            "amount",
            "method",
            "reference",
            "notes",
            "is_auto",
            "created_at",
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "customer",
            "customer_name",
            "invoice_date",
            "due_date",
            "status",
            "vat_percent",
            "discount_percent",
            "subtotal",
            "vat_amount",
            "discount_amount",
            "total_amount",
            "previous_balance",
            "gross_total",
            "amount_paid",
            "credits_applied",
            "balance_remaining",
            "sales_rep",
            "sales_rep_phone",
            "purchase_order_no",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CreditNoteSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    invoice_number = serializers.CharField(
        source="invoice.invoice_number", read_only=True, default=None
    )
    items = CreditNoteItemSerializer(many=True, read_only=True)

    class Meta:
        model = CreditNote
        fields = [
            "id",
            "credit_note_number",
            "customer",
            "customer_name",
            "invoice",
            "invoice_number",
            "credit_note_date",
            "status",
            "reason",
            "vat_percent",
            "subtotal",
            "vat_amount",
            "total_amount",
            "sales_rep",
            "sales_rep_phone",
            "items",
            "created_at",
        ]
        read_only_fields = fields


# ============================================================
# COMMANDS
# ============================================================


class LineCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    uom = serializers.CharField(required=False, allow_blank=True, default=UnitOfMeasure.BOX.value)
    qty = serializers.DecimalField(max_digits=12, decimal_places=3)
    factor = serializers.DecimalField(
        max_digits=10, decimal_places=3, required=False, allow_null=True
    )
    unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    vat_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )


class InvoiceCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    vat_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    previous_balance = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True
    )
    sales_rep = serializers.CharField(required=False, allow_blank=True, default="")
    sales_rep_phone = serializers.CharField(required=False, allow_blank=True, default="")
    purchase_order_no = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineCreateSerializer(many=True, required=False, default=list)


class RecomputeSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(
        choices=[m.value for m in RecomputeMode], required=False, allow_null=True
    )


class AddItemSerializer(LineCreateSerializer):
    recompute = serializers.BooleanField(required=False, default=True)


class DiscountSerializer(serializers.Serializer):
    discount_percent = serializers.DecimalField(max_digits=7, decimal_places=2)


class VatPercentSerializer(serializers.Serializer):
    vat_percent = serializers.DecimalField(max_digits=5, decimal_places=2)


class MarkPaidSerializer(serializers.Serializer):
    payment_date = serializers.DateField(required=False)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateField(required=False)
    method = serializers.CharField(required=False, allow_blank=True, default="Cash")
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreditNoteCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    invoice_id = serializers.UUIDField(required=False, allow_null=True)
    credit_note_date = serializers.DateField(required=False)
    vat_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(
        choices=[CreditNote.STATUS_ISSUED, CreditNote.STATUS_PENDING],
        required=False,
        default=CreditNote.STATUS_ISSUED,
    )
    sales_rep = serializers.CharField(required=False, allow_blank=True, default="")
    sales_rep_phone = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineCreateSerializer(many=True)
