# invoicing/api/views.py

"""
INVOICING API

- InvoiceViewSet: read + create + line / header / lifecycle commands + payments
- CreditNoteViewSet: read + create + void / refund / restore

All money math happens in invoicing.services; views validate input,
call one service and translate domain errors to the canonical error body.
"""

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.models import Customer
from invoicing.api.errors import domain_error_response, not_found
from invoicing.api.serializers import (
    AddItemSerializer,
    CreditNoteCreateSerializer,
    CreditNoteSerializer,
    DiscountSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    MarkPaidSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    RecomputeSerializer,
    VatPercentSerializer,
)
from invoicing.models import CreditNote, Invoice, InvoiceItem, Payment
from invoicing.services import credit_note_service, invoice_service, payment_service
from invoicing.services.exceptions import InvoicingError


def _fresh_invoice(invoice_id) -> Invoice:
    return (
        Invoice.objects.select_related("customer")
        .prefetch_related("items", "items__product")
        .get(id=invoice_id)
    )


def _fresh_credit_note(credit_note_id) -> CreditNote:
    return (
        CreditNote.objects.select_related("customer", "invoice")
        .prefetch_related("items", "items__product")
        .get(id=credit_note_id)
    )


# ======================================================
# INVOICES
# ======================================================


class InvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Invoice endpoints.

    - list/retrieve (?status=, ?customer=)
    - create with lines
    - recompute / items / discount / vat / issue / mark-paid / void
    - payments (list + record)
    """

    queryset = (
        Invoice.objects.select_related("customer")
        .prefetch_related("items", "items__product")
        .order_by("-invoice_date", "-created_at")
    )
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "customer"]

    def _respond(self, invoice_id, http_status=status.HTTP_200_OK):
        return Response(InvoiceSerializer(_fresh_invoice(invoice_id)).data, status=http_status)

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request, *args, **kwargs):
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            customer = Customer.objects.get(id=data.pop("customer_id"))
        except Customer.DoesNotExist:
            return not_found("Customer not found")

        lines = [dict(line) for line in data.pop("items", [])]

        try:
            invoice = invoice_service.create_invoice(customer=customer, lines=lines, **data)
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id, status.HTTP_201_CREATED)

    # --------------------------------------------------
    # HEADER
    # --------------------------------------------------

    @extend_schema(request=RecomputeSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="recompute")
    def recompute(self, request, pk=None):
        invoice = self.get_object()
        s = RecomputeSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice_service.recompute_invoice(
                invoice_id=invoice.id, mode=s.validated_data.get("mode")
            )
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id)

    @extend_schema(request=DiscountSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="discount")
    def discount(self, request, pk=None):
        invoice = self.get_object()
        s = DiscountSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice_service.apply_discount(
                invoice_id=invoice.id,
                discount_percent=s.validated_data["discount_percent"],
            )
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id)

    @extend_schema(request=VatPercentSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="vat")
    def vat(self, request, pk=None):
        invoice = self.get_object()
        s = VatPercentSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice_service.set_vat_percent(
                invoice_id=invoice.id, vat_percent=s.validated_data["vat_percent"]
            )
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id)

    # --------------------------------------------------
    # LINES
    # --------------------------------------------------

    @extend_schema(request=AddItemSerializer, responses={201: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="items")
    def add_item(self, request, pk=None):
        invoice = self.get_object()
        s = AddItemSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        line = dict(s.validated_data)
        recompute = line.pop("recompute", True)

        try:
            invoice_service.add_item(invoice_id=invoice.id, line=line, recompute=recompute)
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id, status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["delete"], url_path=r"items/(?P<item_id>[0-9a-fA-F-]+)")
    def remove_item(self, request, pk=None, item_id=None):
        invoice = self.get_object()
        recompute = (request.query_params.get("recompute") or "true").lower() != "false"

        try:
            invoice_service.remove_item(
                invoice_id=invoice.id, item_id=item_id, recompute=recompute
            )
        except (InvoiceItem.DoesNotExist, ValidationError):
            return not_found("Invoice line not found")
        except InvoicingError as exc:
            return domain_error_response(exc)

        return self._respond(invoice.id)

    # --------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------

    @extend_schema(request=None, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="issue")
    def issue(self, request, pk=None):
        invoice = self.get_object()
        try:
            invoice_service.issue_invoice(invoice_id=invoice.id)
        except InvoicingError as exc:
            return domain_error_response(exc)
        return self._respond(invoice.id)

    @extend_schema(request=MarkPaidSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        invoice = self.get_object()
        s = MarkPaidSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            payment_service.mark_invoice_paid(
                invoice_id=invoice.id,
                payment_date=s.validated_data.get("payment_date"),
            )
        except InvoicingError as exc:
            return domain_error_response(exc)
        return self._respond(invoice.id)

    @extend_schema(request=None, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request, pk=None):
        invoice = self.get_object()
        try:
            invoice_service.void_invoice(invoice_id=invoice.id)
        except InvoicingError as exc:
            return domain_error_response(exc)
        return self._respond(invoice.id)

    # --------------------------------------------------
    # PAYMENTS
    # --------------------------------------------------

    @extend_schema(request=PaymentCreateSerializer, responses={200: PaymentSerializer(many=True)})
    @action(detail=True, methods=["get", "post"], url_path="payments")
    def payments(self, request, pk=None):
        invoice = self.get_object()

        if request.method == "GET":
            qs = (
                Payment.objects.select_related("invoice")
                .filter(invoice=invoice)
                .order_by("-payment_date", "-created_at")
            )
            return Response(PaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

        s = PaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            payment = payment_service.record_payment(invoice_id=invoice.id, **s.validated_data)
        except InvoicingError as exc:
            return domain_error_response(exc)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


# ======================================================
# CREDIT NOTES
# ======================================================


class CreditNoteViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = (
        CreditNote.objects.select_related("customer", "invoice")
        .prefetch_related("items", "items__product")
        .order_by("-credit_note_date", "-created_at")
    )
    serializer_class = CreditNoteSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "customer", "invoice"]

    @extend_schema(request=CreditNoteCreateSerializer, responses={201: CreditNoteSerializer})
    def create(self, request, *args, **kwargs):
        s = CreditNoteCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            customer = Customer.objects.get(id=data.pop("customer_id"))
        except Customer.DoesNotExist:
            return not_found("Customer not found")

        lines = [dict(line) for line in data.pop("items")]

        try:
            credit_note = credit_note_service.create_credit_note(
                customer=customer, lines=lines, **data
            )
        except Invoice.DoesNotExist:
            return not_found("Invoice not found")
        except InvoicingError as exc:
            return domain_error_response(exc)

        return Response(
            CreditNoteSerializer(_fresh_credit_note(credit_note.id)).data,
            status=status.HTTP_201_CREATED,
        )

    def _transition(self, service_fn):
        credit_note = self.get_object()
        try:
            service_fn(credit_note_id=credit_note.id)
        except InvoicingError as exc:
            return domain_error_response(exc)
        return Response(
            CreditNoteSerializer(_fresh_credit_note(credit_note.id)).data,
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=None, responses={200: CreditNoteSerializer})
    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request, pk=None):
        return self._transition(credit_note_service.void_credit_note)

    @extend_schema(request=None, responses={200: CreditNoteSerializer})
    @action(detail=True, methods=["post"], url_path="refund")
    def refund(self, request, pk=None):
        return self._transition(credit_note_service.refund_credit_note)

    @extend_schema(request=None, responses={200: CreditNoteSerializer})
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, pk=None):
        return self._transition(credit_note_service.restore_credit_note)
