# sales/tests/test_sale_manager.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from pos.domain import DISCOUNT_FIXED, Cart, ManualDiscount
from pos.services.exceptions import EmptyCartError, RegisterValidationError, RequestFailedError
from pos.tests.factories import FakeSaleBackend, backend_down, make_customer, make_product
from sales.records import PendingSale
from sales.services.backend import SaleNotFoundError
from sales.services.sale_lifecycle import (
    InvalidSaleTransitionError,
    can_transition,
    reversal_for,
    validate_transition,
)
from sales.services.sale_manager import SaleLifecycleManager, build_sale_request

RATE = Decimal("0.13")


class SaleRequestTests(SimpleTestCase):
    def setUp(self):
        self.product = make_product(price="10.00", on_hand=10, name="Desk Lamp")
        self.cart = Cart()
        self.cart.add_item(self.product, 3)
        self.cart.set_order_discount(ManualDiscount(kind=DISCOUNT_FIXED, value=Decimal("5")))

    def test_request_carries_register_amounts(self):
        request = build_sale_request(self.cart, "cash", tax_rate=RATE, amount_tendered="30")

        self.assertEqual(request.items[0].unit_price, Decimal("10.00"))
        self.assertEqual(request.items[0].quantity, 3)
        self.assertEqual(request.discount_amount, Decimal("5.00"))
        self.assertEqual(request.tax_amount, Decimal("3.25"))
        self.assertEqual(request.amount_tendered, Decimal("30.00"))

    def test_item_discounts_fold_into_unit_price(self):
        self.cart.set_line_override(self.product.id, item_discount="1.50", discount_reason="scuffed")
        request = build_sale_request(self.cart, "card", tax_rate=RATE)
        self.assertEqual(request.items[0].unit_price, Decimal("8.50"))

    def test_request_is_independent_of_later_cart_changes(self):
        request = build_sale_request(self.cart, "card", tax_rate=RATE)
        self.cart.update_quantity(self.product.id, 2)
        self.cart.set_customer(make_customer())

        self.assertEqual(request.items[0].quantity, 3)
        self.assertIsNone(request.customer_id)

    def test_empty_cart_rejected(self):
        with self.assertRaises(EmptyCartError):
            build_sale_request(Cart(), "cash", tax_rate=RATE)

    def test_tender_only_for_cash(self):
        with self.assertRaises(RegisterValidationError):
            build_sale_request(self.cart, "card", tax_rate=RATE, amount_tendered="50")

    def test_payload_omits_empty_optionals(self):
        payload = build_sale_request(self.cart, "card", tax_rate=Decimal("0"), amount_tendered=None).to_payload()
        self.assertNotIn("amount_tendered", payload)
        self.assertNotIn("tax_amount", payload)
        self.assertEqual(payload["discount_amount"], "5.00")


class SaleLifecycleManagerTests(SimpleTestCase):
    """
    GUARANTEES:
    - A sale is only reported done after the backend confirmed it
    - Reasons are validated before any request
    - Only completed sales can be voided or returned
    """

    def setUp(self):
        self.backend = FakeSaleBackend()
        self.manager = SaleLifecycleManager(self.backend)
        self.cart = Cart()
        self.cart.add_item(make_product(price="10.00", on_hand=10), 2)

    def _sale(self):
        return self.manager.create_sale(self.cart, "card", tax_rate=RATE).sale

    def test_prepare_does_not_submit(self):
        pending = self.manager.prepare(self.cart, "card", tax_rate=RATE)

        self.assertIsInstance(pending, PendingSale)
        self.assertEqual(pending.total, Decimal("22.60"))
        self.assertEqual(self.backend.requests, [])

    def test_submit_returns_confirmed_sale(self):
        confirmed = self.manager.submit(self.manager.prepare(self.cart, "card", tax_rate=RATE))

        self.assertEqual(confirmed.sale.total, Decimal("22.60"))
        self.assertEqual(confirmed.sale.status, "completed")
        self.assertEqual(len(self.backend.requests), 1)

    def test_backend_failure_is_wrapped(self):
        self.backend.fail_with = backend_down()
        with self.assertRaises(RequestFailedError):
            self.manager.create_sale(self.cart, "card", tax_rate=RATE)

    def test_unconfirmed_sale_is_not_reported(self):
        self.backend.create_sale = lambda request: None
        with self.assertRaises(RequestFailedError):
            self.manager.create_sale(self.cart, "card", tax_rate=RATE)

    def test_void_completed_sale(self):
        sale = self._sale()

        voided = self.manager.void_sale(sale.id, "  wrong item  ")

        self.assertEqual(voided.status, "voided")
        self.assertEqual(voided.void_reason, "wrong item")

    def test_return_completed_sale(self):
        sale = self._sale()
        returned = self.manager.process_return(sale.id, "damaged")
        self.assertEqual(returned.status, "returned")

    def test_whitespace_reason_rejected_before_any_request(self):
        sale = self._sale()
        self.backend.requests.clear()
        self.backend.fail_with = backend_down()

        with self.assertRaises(RegisterValidationError):
            self.manager.void_sale(sale.id, "   ")

        # the queued failure was never consumed
        self.assertIsNotNone(self.backend.fail_with)
        self.assertEqual(self.backend.sales[sale.id].status, "completed")

    def test_terminal_sale_cannot_be_reversed(self):
        sale = self._sale()
        self.manager.void_sale(sale.id, "customer left")

        with self.assertRaises(RegisterValidationError):
            self.manager.void_sale(sale.id, "again")
        with self.assertRaises(RegisterValidationError):
            self.manager.process_return(sale.id, "too late")

    def test_unknown_sale(self):
        with self.assertRaises(SaleNotFoundError):
            self.manager.get_sale("nope")

    def test_list_sales_filters_by_status(self):
        first = self._sale()
        self.cart.add_item(make_product(price="1.00", on_hand=1))
        self._sale()
        self.manager.void_sale(first.id, "test")

        page = self.manager.list_sales(status="voided")

        self.assertEqual(page.total, 1)
        self.assertEqual(page.items[0].id, first.id)
        self.assertEqual(self.manager.list_sales().total, 2)


class SaleLifecycleRulesTests(SimpleTestCase):
    def test_transitions(self):
        self.assertTrue(can_transition(from_status="completed", to_status="voided"))
        self.assertTrue(can_transition(from_status="completed", to_status="returned"))
        self.assertFalse(can_transition(from_status="voided", to_status="returned"))
        self.assertFalse(can_transition(from_status="returned", to_status="completed"))

    def test_each_reversal_stamps_its_own_columns(self):
        void = reversal_for("voided")
        self.assertEqual(void.update_fields, ("status", "voided_at", "void_reason"))
        self.assertEqual(void.backend_method, "void_sale")

        ret = reversal_for("returned")
        self.assertEqual(ret.update_fields, ("status", "returned_at", "return_reason"))
        self.assertEqual(ret.backend_method, "return_sale")

    def test_completed_is_not_a_reversal_target(self):
        with self.assertRaises(InvalidSaleTransitionError):
            reversal_for("completed")

    def test_voided_sale_cannot_be_returned(self):
        sale = SimpleNamespace(id="s-1", status="voided")
        with self.assertRaises(InvalidSaleTransitionError):
            validate_transition(sale=sale, target_status="returned")
        self.assertEqual(
            validate_transition(sale=SimpleNamespace(id="s-2", status="completed"), target_status="returned"),
            reversal_for("returned"),
        )
