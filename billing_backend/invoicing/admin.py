# invoicing/admin.py

from django.contrib import admin

from invoicing.models import CreditNote, CreditNoteItem, Invoice, InvoiceItem, Payment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = (
        "quantity",
        "unit_price_excl_vat",
        "unit_vat",
        "unit_price_incl_vat",
        "line_total",
    )


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ("payment_date", "amount", "method", "reference", "is_auto")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "customer",
        "invoice_date",
        "status",
        "total_amount",
        "amount_paid",
        "balance_remaining",
    )
    list_filter = ("status", "invoice_date")
    search_fields = ("invoice_number", "customer__name", "sales_rep")
    readonly_fields = (
        "subtotal",
        "vat_amount",
        "discount_amount",
        "total_amount",
        "gross_total",
        "amount_paid",
        "credits_applied",
        "balance_remaining",
    )
    inlines = [InvoiceItemInline, PaymentInline]


class CreditNoteItemInline(admin.TabularInline):
    model = CreditNoteItem
    extra = 0


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "customer", "credit_note_date", "status", "total_amount")
    list_filter = ("status",)
    search_fields = ("credit_note_number", "customer__name")
    inlines = [CreditNoteItemInline]
