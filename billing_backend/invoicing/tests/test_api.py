# invoicing/tests/test_api.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from customers.models import Customer
from invoicing.models import CreditNote, Invoice, Payment
from products.models import Product

User = get_user_model()


class InvoicingApiTests(TestCase):
    """
    API contract tests.

    GUARANTEES:
    - Endpoints require authentication
    - Domain errors use the canonical {"error": {"code", "message"}} body
    - Money is serialized as strings with 2 dp
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="clerk", password="pass")
        self.client.force_authenticate(user=self.user)

        self.customer = Customer.objects.create(name="Corner Shop")
        self.oil = Product.objects.create(
            sku="OIL-2L",
            name="Cooking Oil 2L",
            selling_price=Decimal("100.00"),
            units_per_box=12,
        )

    def _create(self, items=None, **extra):
        payload = {
            "customer_id": str(self.customer.id),
            "vat_percent": "15.00",
            "items": items
            if items is not None
            else [{"product_id": str(self.oil.id), "uom": "PCS", "qty": "1"}],
            **extra,
        }
        return self.client.post("/api/invoices/", payload, format="json")

    def _issued_invoice_id(self):
        res = self._create()
        invoice_id = res.data["id"]
        self.client.post(f"/api/invoices/{invoice_id}/issue/", {}, format="json")
        return invoice_id

    # =====================================================
    # AUTH
    # =====================================================

    def test_anonymous_is_rejected(self):
        anon = APIClient()
        res = anon.get("/api/invoices/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    # =====================================================
    # INVOICES
    # =====================================================

    def test_create_invoice(self):
        res = self._create()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], Invoice.STATUS_DRAFT)
        self.assertEqual(res.data["total_amount"], "115.00")
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["items"][0]["product_name"], "Cooking Oil 2L")

    def test_box_line_uses_units_per_box(self):
        res = self._create(items=[{"product_id": str(self.oil.id), "uom": "BOX", "qty": "2"}])

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["items"][0]["quantity"], "24.000")
        self.assertEqual(res.data["subtotal"], "2400.00")

    def test_invalid_quantity_error_body(self):
        res = self._create(items=[{"product_id": str(self.oil.id), "uom": "PCS", "qty": "0"}])

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_QUANTITY")
        self.assertEqual(Invoice.objects.count(), 0)

    def test_missing_product_error_body(self):
        res = self._create(items=[{"product_id": str(uuid.uuid4()), "uom": "PCS", "qty": "1"}])

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "MISSING_PRODUCT")

    def test_unknown_customer(self):
        res = self.client.post(
            "/api/invoices/",
            {"customer_id": str(uuid.uuid4()), "items": []},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_discount_and_base_recompute(self):
        invoice_id = self._create().data["id"]

        res = self.client.post(
            f"/api/invoices/{invoice_id}/discount/", {"discount_percent": "10"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["subtotal"], "90.00")
        self.assertEqual(res.data["total_amount"], "103.50")

        res = self.client.post(
            f"/api/invoices/{invoice_id}/recompute/", {"mode": "BASE_RECOMPUTE"}, format="json"
        )
        self.assertEqual(res.data["discount_percent"], "0.00")
        self.assertEqual(res.data["total_amount"], "115.00")

    def test_add_and_remove_item(self):
        invoice_id = self._create().data["id"]

        res = self.client.post(
            f"/api/invoices/{invoice_id}/items/",
            {"description": "Delivery", "uom": "PCS", "qty": "1", "unit_price": "20", "vat_rate": "0"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["total_amount"], "135.00")

        delivery = next(i for i in res.data["items"] if i["description"] == "Delivery")
        res = self.client.delete(f"/api/invoices/{invoice_id}/items/{delivery['id']}/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_amount"], "115.00")

    def test_remove_unknown_item(self):
        invoice_id = self._create().data["id"]
        res = self.client.delete(f"/api/invoices/{invoice_id}/items/{uuid.uuid4()}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_remove_item_with_malformed_id(self):
        invoice_id = self._create().data["id"]
        res = self.client.delete(f"/api/invoices/{invoice_id}/items/abc/")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")
        self.assertEqual(Invoice.objects.get(id=invoice_id).items.count(), 1)

    def test_vat_change(self):
        invoice_id = self._create().data["id"]
        res = self.client.post(
            f"/api/invoices/{invoice_id}/vat/", {"vat_percent": "0"}, format="json"
        )
        self.assertEqual(res.data["total_amount"], "100.00")

    # =====================================================
    # PAYMENTS / LIFECYCLE
    # =====================================================

    def test_payment_flow(self):
        invoice_id = self._issued_invoice_id()

        res = self.client.post(
            f"/api/invoices/{invoice_id}/payments/",
            {"amount": "15.00", "method": "Cash"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["amount"], "15.00")

        res = self.client.get(f"/api/invoices/{invoice_id}/")
        self.assertEqual(res.data["status"], Invoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(res.data["balance_remaining"], "100.00")

        res = self.client.get(f"/api/invoices/{invoice_id}/payments/")
        self.assertEqual(len(res.data), 1)

    def test_payment_on_draft_is_rejected(self):
        invoice_id = self._create().data["id"]
        res = self.client.post(
            f"/api/invoices/{invoice_id}/payments/", {"amount": "15.00"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_INVOICE_STATE")

    def test_zero_payment_is_rejected(self):
        invoice_id = self._issued_invoice_id()
        res = self.client.post(
            f"/api/invoices/{invoice_id}/payments/", {"amount": "0.00"}, format="json"
        )
        self.assertEqual(res.data["error"]["code"], "INVALID_PAYMENT")

    def test_mark_paid(self):
        invoice_id = self._issued_invoice_id()
        res = self.client.post(f"/api/invoices/{invoice_id}/mark-paid/", {}, format="json")

        self.assertEqual(res.data["status"], Invoice.STATUS_PAID)
        self.assertTrue(Payment.objects.filter(invoice_id=invoice_id, is_auto=True).exists())

    def test_void_then_issue_fails(self):
        invoice_id = self._create().data["id"]
        self.client.post(f"/api/invoices/{invoice_id}/void/", {}, format="json")

        res = self.client.post(f"/api/invoices/{invoice_id}/issue/", {}, format="json")
        self.assertEqual(res.data["error"]["code"], "INVALID_INVOICE_STATE")

    def test_filter_by_status(self):
        self._issued_invoice_id()
        self._create()

        res = self.client.get("/api/invoices/", {"status": Invoice.STATUS_ISSUED})
        self.assertEqual(res.data["count"], 1)

    # =====================================================
    # CREDIT NOTES
    # =====================================================

    def test_credit_note_flow(self):
        invoice_id = self._issued_invoice_id()

        res = self.client.post(
            "/api/credit-notes/",
            {
                "customer_id": str(self.customer.id),
                "invoice_id": invoice_id,
                "reason": "Damaged",
                "items": [{"description": "Dented can", "uom": "PCS", "qty": "1", "unit_price": "20"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["total_amount"], "23.00")
        credit_note_id = res.data["id"]

        invoice = self.client.get(f"/api/invoices/{invoice_id}/").data
        self.assertEqual(invoice["credits_applied"], "23.00")
        self.assertEqual(invoice["balance_remaining"], "92.00")

        res = self.client.post(f"/api/credit-notes/{credit_note_id}/void/", {}, format="json")
        self.assertEqual(res.data["status"], CreditNote.STATUS_VOID)

        res = self.client.post(f"/api/credit-notes/{credit_note_id}/refund/", {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_CREDIT_NOTE_STATE")

    def test_credit_note_for_unknown_invoice(self):
        res = self.client.post(
            "/api/credit-notes/",
            {
                "customer_id": str(self.customer.id),
                "invoice_id": str(uuid.uuid4()),
                "items": [{"description": "x", "uom": "PCS", "qty": "1", "unit_price": "1"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
