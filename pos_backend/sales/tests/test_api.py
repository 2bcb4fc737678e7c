# sales/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product
from sales.records import CreateSaleRequest, SaleRequestItem
from sales.services.backend import DatabaseSaleBackend

User = get_user_model()


class SaleAPITests(TestCase):
    """
    GUARANTEES:
    - Void/return need a non-blank reason
    - A reversed sale cannot be reversed again
    - Errors use the canonical error envelope
    """

    def setUp(self):
        self.user = User.objects.create_user(username="manager", password="pass")
        self.client = APIClient()
        self.client.force_authenticate(self.user)

        self.product = Product.objects.create(sku="LAMP-1", name="Desk Lamp", unit_price="10.00", quantity_on_hand=10)
        self.backend = DatabaseSaleBackend()

    def _sale(self, quantity=1):
        return self.backend.create_sale(
            CreateSaleRequest(
                items=(SaleRequestItem(product_id=str(self.product.id), quantity=quantity, unit_price=Decimal("10.00")),),
                payment_method="card",
            )
        )

    def test_requires_authentication(self):
        response = APIClient().get("/api/sales/")
        self.assertIn(response.status_code, (401, 403))

    def test_list_and_filter(self):
        first = self._sale()
        self._sale()
        self.client.post(f"/api/sales/{first.id}/void/", {"reason": "test"}, format="json")

        response = self.client.get("/api/sales/", {"page_size": 1})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(response.data["pages"], 2)
        self.assertEqual(len(response.data["results"]), 1)

        response = self.client.get("/api/sales/", {"status": "voided"})
        self.assertEqual([s["id"] for s in response.data["results"]], [first.id])

    def test_invalid_status_filter(self):
        response = self.client.get("/api/sales/", {"status": "refunded"})
        self.assertEqual(response.status_code, 400)

    def test_retrieve(self):
        sale = self._sale(quantity=2)
        response = self.client.get(f"/api/sales/{sale.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["transaction_number"], sale.transaction_number)
        self.assertEqual(response.data["items"][0]["line_total"], "20.00")

    def test_unknown_sale(self):
        response = self.client.get("/api/sales/not-a-sale/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "SALE_NOT_FOUND")

    def test_void_restores_stock(self):
        sale = self._sale(quantity=3)

        response = self.client.post(f"/api/sales/{sale.id}/void/", {"reason": "wrong customer"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "voided")
        self.assertEqual(response.data["void_reason"], "wrong customer")
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, 10)

    def test_blank_reason_rejected(self):
        sale = self._sale()

        response = self.client.post(f"/api/sales/{sale.id}/return/", {"reason": "   "}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(self.backend.get_sale(sale.id).status, "completed")

    def test_second_reversal_rejected(self):
        sale = self._sale()
        self.client.post(f"/api/sales/{sale.id}/return/", {"reason": "damaged"}, format="json")

        response = self.client.post(f"/api/sales/{sale.id}/void/", {"reason": "again"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(self.backend.get_sale(sale.id).status, "returned")
