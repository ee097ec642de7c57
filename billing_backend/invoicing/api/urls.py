# invoicing/api/urls.py

"""
INVOICING URLS

Mounted at /api/:
- invoices/
- credit-notes/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from invoicing.api.views import CreditNoteViewSet, InvoiceViewSet

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoices")
router.register(r"credit-notes", CreditNoteViewSet, basename="credit-notes")

urlpatterns = [
    path("", include(router.urls)),
]
