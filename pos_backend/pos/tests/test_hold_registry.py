# pos/tests/test_hold_registry.py

from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase
from django.utils import timezone

from pos.domain import DISCOUNT_FIXED, Cart, ManualDiscount
from pos.services.exceptions import HoldNotFoundError
from pos.services.hold_registry import AUTO_HOLD_NOTE, HeldTransaction, HoldRegistry
from pos.tests.factories import make_customer, make_product


def _cart(*products, notes=""):
    cart = Cart(notes=notes)
    for product in products:
        cart.add_item(product)
    return cart


class HoldRegistryTests(SimpleTestCase):
    def setUp(self):
        self.changes = 0
        self.registry = HoldRegistry(on_change=self._on_change)

    def _on_change(self):
        self.changes += 1

    def test_empty_cart_is_not_held(self):
        self.assertIsNone(self.registry.hold(Cart(), "nothing"))
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.changes, 0)

    def test_hold_then_resume_round_trip(self):
        cart = _cart(make_product(), make_product(), notes="table 4")
        cart.set_customer(make_customer())
        cart.set_order_discount(ManualDiscount(kind=DISCOUNT_FIXED, value=Decimal("3")))

        entry = self.registry.hold(cart, "lunch break")
        restored, auto_held = self.registry.resume(entry.id, live_cart=Cart())

        self.assertEqual(restored, cart)
        self.assertEqual(restored.hold_id, entry.id)
        self.assertIsNone(auto_held)
        self.assertEqual(len(self.registry), 0)

    def test_held_snapshot_is_isolated_from_live_cart(self):
        product = make_product()
        cart = _cart(product)
        entry = self.registry.hold(cart)

        cart.add_item(product)

        self.assertEqual(self.registry.get(entry.id).cart.get_line(product.id).quantity, 1)

    def test_resumed_cart_does_not_reach_back_into_registry(self):
        product = make_product()
        first = self.registry.hold(_cart(product))
        restored, _ = self.registry.resume(first.id, live_cart=Cart())
        restored.add_item(product)

        second = self.registry.hold(restored)
        self.assertEqual(self.registry.get(second.id).cart.get_line(product.id).quantity, 2)
        self.assertIsNone(self.registry.get(second.id).cart.hold_id)

    def test_resume_auto_holds_non_empty_live_cart(self):
        two_lines = _cart(make_product(), make_product())
        held = self.registry.hold(two_lines, "lunch break")

        live = _cart(make_product())
        restored, auto_held = self.registry.resume(held.id, live_cart=live)

        self.assertEqual(restored.line_count, 2)
        self.assertEqual(len(self.registry), 1)
        self.assertEqual(auto_held.note, AUTO_HOLD_NOTE)
        self.assertEqual(auto_held.cart, live)
        self.assertEqual([e.id for e in self.registry.list()], [auto_held.id])

    def test_resumed_id_cannot_be_resumed_again(self):
        entry = self.registry.hold(_cart(make_product()))
        self.registry.resume(entry.id, live_cart=Cart())

        with self.assertRaises(HoldNotFoundError):
            self.registry.resume(entry.id, live_cart=Cart())

    def test_unknown_id_does_not_auto_hold(self):
        live = _cart(make_product())
        with self.assertRaises(HoldNotFoundError):
            self.registry.resume("HOLD-NOPE", live_cart=live)
        self.assertEqual(len(self.registry), 0)

    def test_remove_discards_without_restoring(self):
        entry = self.registry.hold(_cart(make_product()))
        self.registry.remove(entry.id)

        self.assertNotIn(entry.id, self.registry)
        with self.assertRaises(HoldNotFoundError):
            self.registry.remove(entry.id)

    def test_list_is_oldest_first(self):
        now = timezone.now()
        late = self.registry.hold(_cart(make_product()), now=now)
        early = self.registry.hold(_cart(make_product()), now=now - timedelta(minutes=5))

        self.assertEqual([e.id for e in self.registry.list()], [early.id, late.id])

    def test_entries_survive_dict_round_trip(self):
        entry = self.registry.hold(_cart(make_product()), "call back")
        self.assertEqual(HeldTransaction.from_dict(entry.to_dict()), entry)

    def test_every_write_notifies(self):
        entry = self.registry.hold(_cart(make_product()))
        self.registry.remove(entry.id)
        self.assertEqual(self.changes, 2)
