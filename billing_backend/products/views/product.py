# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Staff product management endpoints (CRUD + search)
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from products.models import Product
from products.serializers.product import ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - CRUD
    - ?q=<search> over sku / item_code / name
    - ?active=true|false
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(name="q", type=str, required=False),
            OpenApiParameter(name="active", type=bool, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        qs = Product.objects.all()

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(sku__icontains=q) | Q(item_code__icontains=q) | Q(name__icontains=q)
            )

        active = (self.request.query_params.get("active") or "").strip().lower()
        if active in ("true", "1"):
            qs = qs.filter(is_active=True)
        elif active in ("false", "0"):
            qs = qs.filter(is_active=False)

        return qs.order_by("name")
