# pos/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Coupon, Customer, Product, TaxRule
from pos.services.registry import sessions
from sales.models import Sale

User = get_user_model()


class RegisterAPITestCase(TestCase):
    base = "/api/registers/front"

    def setUp(self):
        sessions.clear()
        self.addCleanup(sessions.clear)

        self.user = User.objects.create_user(username="cashier", password="pass")
        self.client = APIClient()
        self.client.force_authenticate(self.user)

        TaxRule.objects.create(name="HST", rate="13.00")
        self.lamp = Product.objects.create(sku="LAMP-1", name="Desk Lamp", unit_price="10.00", quantity_on_hand=5)
        self.mug = Product.objects.create(sku="MUG-1", name="Mug", unit_price="4.50", quantity_on_hand=1)
        self.customer = Customer.objects.create(name="Grace Hopper", email="grace@example.com")
        Coupon.objects.create(code="save10", discount_type="percentage", value="10")

    def url(self, path=""):
        return f"{self.base}/{path}"

    def add(self, product, quantity=1):
        return self.client.post(
            self.url("cart/items/"),
            {"product_id": str(product.id), "quantity": quantity},
            format="json",
        )


class RegisterCartAPITests(RegisterAPITestCase):
    def test_requires_authentication(self):
        response = APIClient().get(self.url())
        self.assertIn(response.status_code, (401, 403))

    def test_empty_register_state(self):
        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["register_id"], "front")
        self.assertEqual(response.data["cart"]["lines"], [])
        self.assertEqual(response.data["totals"]["total"], "0.00")
        self.assertEqual(response.data["checkout"]["state"], "building")

    def test_add_item_returns_totals(self):
        response = self.add(self.lamp, 2)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["cart"]["item_count"], 2)
        self.assertEqual(response.data["totals"]["subtotal"], "20.00")
        self.assertEqual(response.data["totals"]["tax"], "2.60")
        self.assertEqual(response.data["totals"]["total"], "22.60")

    def test_stock_exceeded_error_envelope(self):
        self.add(self.mug)
        response = self.add(self.mug)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "STOCK_EXCEEDED")
        self.assertEqual(response.data["error"]["available"], 1)
        self.assertEqual(self.client.get(self.url()).data["cart"]["item_count"], 1)

    def test_unknown_product(self):
        response = self.client.post(self.url("cart/items/"), {"product_id": "nope"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_quantity_and_remove(self):
        self.add(self.lamp, 2)

        response = self.client.post(self.url(f"cart/items/{self.lamp.id}/quantity/"), {"delta": -1}, format="json")
        self.assertEqual(response.data["cart"]["lines"][0]["quantity"], 1)

        response = self.client.delete(self.url(f"cart/items/{self.lamp.id}/"))
        self.assertEqual(response.data["cart"]["lines"], [])

    def test_line_override_requires_reason_for_discount(self):
        self.add(self.lamp)
        path = self.url(f"cart/items/{self.lamp.id}/")

        response = self.client.patch(path, {"item_discount": "1.00"}, format="json")
        self.assertEqual(response.status_code, 400)

        response = self.client.patch(path, {"item_discount": "1.00", "discount_reason": "display model"}, format="json")
        line = response.data["cart"]["lines"][0]
        self.assertEqual(line["effective_unit_price"], "9.00")
        self.assertEqual(line["discount_reason"], "display model")

    def test_coupon_and_manual_discount_are_exclusive(self):
        self.add(self.lamp, 2)

        response = self.client.put(self.url("cart/discount/"), {"kind": "fixed", "value": "5"}, format="json")
        self.assertEqual(response.data["totals"]["discount"], "5.00")

        response = self.client.post(self.url("cart/coupon/"), {"code": "SAVE10"}, format="json")
        self.assertEqual(response.data["cart"]["coupon_code"], "SAVE10")
        self.assertEqual(response.data["totals"]["discount"], "2.00")

        response = self.client.post(self.url("cart/coupon/"), {"code": "BOGUS"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_percentage_above_hundred_rejected(self):
        response = self.client.put(self.url("cart/discount/"), {"kind": "percentage", "value": "150"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_set_customer_and_notes(self):
        self.client.put(self.url("cart/customer/"), {"customer_id": str(self.customer.id)}, format="json")
        response = self.client.put(self.url("cart/notes/"), {"notes": "gift wrap"}, format="json")

        self.assertEqual(response.data["cart"]["customer"]["name"], "Grace Hopper")
        self.assertEqual(response.data["cart"]["notes"], "gift wrap")

    def test_customer_search(self):
        response = self.client.get(self.url("customers/"), {"q": "grace"})
        self.assertEqual([c["name"] for c in response.data], ["Grace Hopper"])

    def test_registers_are_isolated(self):
        self.add(self.lamp)
        response = self.client.get("/api/registers/back/")
        self.assertEqual(response.data["cart"]["lines"], [])


class RegisterHoldAPITests(RegisterAPITestCase):
    def test_hold_and_resume(self):
        self.add(self.lamp)
        response = self.client.post(self.url("holds/"), {"note": "wallet in car"}, format="json")

        self.assertEqual(response.status_code, 201)
        hold_id = response.data["held"]["id"]
        self.assertEqual(response.data["cart"]["lines"], [])

        self.add(self.mug)
        response = self.client.post(self.url(f"holds/{hold_id}/resume/"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["cart"]["lines"][0]["product_name"], "Desk Lamp")
        self.assertIsNotNone(response.data["auto_held"])

        response = self.client.post(self.url(f"holds/{hold_id}/resume/"))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "HOLD_NOT_FOUND")

    def test_empty_cart_is_not_held(self):
        response = self.client.post(self.url("holds/"), {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data["held"])

    def test_delete_hold(self):
        self.add(self.lamp)
        hold_id = self.client.post(self.url("holds/"), {}, format="json").data["held"]["id"]

        self.assertEqual(self.client.delete(self.url(f"holds/{hold_id}/")).status_code, 204)
        self.assertEqual(self.client.get(self.url("holds/")).data, [])


class RegisterCheckoutAPITests(RegisterAPITestCase):
    def test_cash_checkout(self):
        self.add(self.lamp, 2)

        response = self.client.post(self.url("checkout/begin/"))
        self.assertEqual(response.data["checkout"]["state"], "method_selection")

        response = self.client.post(self.url("checkout/method/"), {"payment_method": "cash"}, format="json")
        self.assertEqual(response.data["checkout"]["state"], "cash_tender")
        self.assertIsNone(response.data["sale"])

        response = self.client.post(self.url("checkout/tender/"), {"amount": "20.00"}, format="json")
        self.assertEqual(response.data["checkout"]["change_due"], "-2.60")

        response = self.client.post(self.url("checkout/confirm/"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "INSUFFICIENT_TENDER")

        self.client.post(self.url("checkout/tender/"), {"amount": "25.00"}, format="json")
        response = self.client.post(self.url("checkout/confirm/"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["checkout"]["state"], "completed")
        self.assertEqual(response.data["sale"]["total"], "22.60")
        self.assertEqual(response.data["sale"]["change_due"], "2.40")
        self.assertEqual(response.data["cart"]["lines"], [])

        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.quantity_on_hand, 3)
        self.assertEqual(Sale.objects.count(), 1)

    def test_card_checkout_and_reset(self):
        self.add(self.lamp)
        self.client.post(self.url("checkout/begin/"))

        response = self.client.post(self.url("checkout/method/"), {"payment_method": "card"}, format="json")
        self.assertTrue(response.data["sale"]["transaction_number"].startswith("TXN-"))

        response = self.client.post(self.url("checkout/reset/"))
        self.assertEqual(response.data["checkout"]["state"], "building")

    def test_begin_with_empty_cart(self):
        response = self.client.post(self.url("checkout/begin/"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "EMPTY_CART")

    def test_invalid_transition(self):
        response = self.client.post(self.url("checkout/tender/"), {"amount": "5"}, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "INVALID_CHECKOUT_TRANSITION")

    def test_cancel(self):
        self.add(self.lamp)
        self.client.post(self.url("checkout/begin/"))

        response = self.client.post(self.url("checkout/cancel/"))

        self.assertEqual(response.data["checkout"]["state"], "building")
        self.assertEqual(response.data["cart"]["item_count"], 1)


class RegisterQuoteAPITests(RegisterAPITestCase):
    def test_save_list_convert(self):
        self.add(self.lamp, 2)

        response = self.client.post(self.url("quotes/"))
        self.assertEqual(response.status_code, 201)
        quote_id = response.data["quote"]["id"]
        self.assertEqual(response.data["quote"]["status"], "pending")
        self.assertEqual(response.data["quote"]["total"], "22.60")
        self.assertEqual(response.data["cart"]["lines"], [])

        response = self.client.get(self.url("quotes/"), {"q": "lamp"})
        self.assertEqual([q["id"] for q in response.data], [quote_id])

        response = self.client.post(self.url(f"quotes/{quote_id}/convert/"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["quote"]["status"], "converted")
        self.assertEqual(response.data["totals"]["total"], "22.60")

        response = self.client.post(self.url(f"quotes/{quote_id}/convert/"))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "QUOTE_NOT_PENDING")

    def test_convert_rejects_quantity_above_current_stock(self):
        self.add(self.lamp, 3)
        quote_id = self.client.post(self.url("quotes/")).data["quote"]["id"]
        Product.objects.filter(pk=self.lamp.pk).update(quantity_on_hand=1)

        response = self.client.post(self.url(f"quotes/{quote_id}/convert/"))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "STOCK_EXCEEDED")
        self.assertEqual(response.data["error"]["available"], 1)
        self.assertEqual(self.client.get(self.url()).data["cart"]["lines"], [])

        response = self.client.get(self.url("quotes/"))
        self.assertEqual(response.data[0]["status"], "pending")

    def test_empty_cart_cannot_be_quoted(self):
        response = self.client.post(self.url("quotes/"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "EMPTY_CART")

    def test_delete_unknown_quote(self):
        response = self.client.delete(self.url("quotes/QT-NOPE/"))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "QUOTE_NOT_FOUND")
