# customers/api/views.py

"""
CUSTOMER VIEWSET

- CRUD (?q= search over code / name / client name / phone)
- statement: GET /api/customers/<id>/statement/?from=YYYY-MM-DD&to=YYYY-MM-DD
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.api.serializers import CustomerSerializer
from customers.models import Customer
from invoicing.api.errors import domain_error_response
from reports.api.params import parse_window
from reports.api.payload import statement_payload
from reports.services.exceptions import ReportError
from reports.services.statement import statement_for_customer


class CustomerViewSet(viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Customer.objects.all()

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(customer_code__icontains=q)
                | Q(name__icontains=q)
                | Q(client_name__icontains=q)
                | Q(phone__icontains=q)
            )

        return qs.order_by("name")

    @extend_schema(
        parameters=[
            OpenApiParameter(name="from", type=OpenApiTypes.DATE, required=True),
            OpenApiParameter(name="to", type=OpenApiTypes.DATE, required=True),
        ],
        description="Statement of account with opening, running and closing balances.",
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=True, methods=["get"], url_path="statement")
    def statement(self, request, pk=None):
        customer = self.get_object()

        try:
            date_from, date_to = parse_window(request.query_params)
            statement = statement_for_customer(
                customer_id=customer.id,
                date_from=date_from,
                date_to=date_to,
            )
        except ReportError as exc:
            return domain_error_response(exc)

        payload = statement_payload(statement)
        payload["customer_name"] = customer.name
        return Response(payload)
