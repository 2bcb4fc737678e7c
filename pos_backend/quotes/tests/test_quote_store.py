# quotes/tests/test_quote_store.py

from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase
from django.utils import timezone

from catalog.services.stock_guard import StockExceededError
from pos.domain import DISCOUNT_FIXED, Cart, ManualDiscount
from pos.services import pricing
from pos.tests.factories import FakeCatalog, make_customer, make_product
from quotes.domain import STATUS_CONVERTED, STATUS_EXPIRED, STATUS_PENDING, Quote, derive_quote_status
from quotes.services.exceptions import QuoteNotFoundError, QuoteNotPendingError
from quotes.services.quote_store import QuoteStore

RATE = Decimal("0.13")


class QuoteStatusTests(SimpleTestCase):
    def setUp(self):
        self.now = timezone.now()

    def test_pending_until_expiry(self):
        self.assertEqual(
            derive_quote_status(stored_status=STATUS_PENDING, expires_at=self.now, now=self.now),
            STATUS_PENDING,
        )

    def test_expired_after_expiry(self):
        self.assertEqual(
            derive_quote_status(
                stored_status=STATUS_PENDING,
                expires_at=self.now - timedelta(seconds=1),
                now=self.now,
            ),
            STATUS_EXPIRED,
        )

    def test_converted_is_terminal(self):
        self.assertEqual(
            derive_quote_status(
                stored_status=STATUS_CONVERTED,
                expires_at=self.now - timedelta(days=30),
                now=self.now,
            ),
            STATUS_CONVERTED,
        )


class QuoteStoreTests(SimpleTestCase):
    def setUp(self):
        self.now = timezone.now()
        self.product = make_product(price="10.00", name="Desk Lamp", on_hand=10)
        self.catalog = FakeCatalog(self.product)
        self.store = QuoteStore()

    def _cart(self):
        cart = Cart()
        cart.add_item(self.product, 3)
        cart.set_customer(make_customer("Grace Hopper"))
        cart.set_order_discount(ManualDiscount(kind=DISCOUNT_FIXED, value=Decimal("5")))
        return cart

    def _save(self, cart=None, now=None):
        cart = cart or self._cart()
        return self.store.save_as_quote(cart, totals=pricing.compute_totals(cart, RATE), now=now or self.now)

    def test_save_snapshots_totals_and_expiry(self):
        quote = self._save()

        self.assertTrue(quote.id.startswith("QT-"))
        self.assertEqual(quote.total, Decimal("28.25"))
        self.assertEqual(quote.expires_at, self.now + timedelta(days=7))
        self.assertEqual(quote.status_at(self.now), STATUS_PENDING)
        self.assertEqual(quote.items[0].name, "Desk Lamp")
        self.assertEqual(quote.customer.name, "Grace Hopper")

    def test_list_rederives_expiry(self):
        quote = self._save(now=self.now - timedelta(days=8))

        listed = self.store.list_quotes(now=self.now)

        self.assertEqual(listed[0].id, quote.id)
        self.assertEqual(listed[0].status_at(self.now), STATUS_EXPIRED)
        self.assertEqual(listed[0].stored_status, STATUS_EXPIRED)

    def test_list_search_and_order(self):
        older = self._save(now=self.now - timedelta(hours=2))
        newer = self._save(now=self.now - timedelta(hours=1))

        self.assertEqual([q.id for q in self.store.list_quotes(now=self.now)], [newer.id, older.id])
        self.assertEqual(len(self.store.list_quotes("grace", now=self.now)), 2)
        self.assertEqual(len(self.store.list_quotes("lamp", now=self.now)), 2)
        self.assertEqual(self.store.list_quotes("nobody", now=self.now), [])

    def test_convert_pending_quote(self):
        quote = self._save()

        cart = self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

        self.assertEqual(cart.get_line(self.product.id).quantity, 3)
        self.assertIsNone(cart.get_line(self.product.id).price_override)
        self.assertEqual(cart.order_discount.value, Decimal("5.00"))
        self.assertEqual(pricing.total(cart, RATE), quote.total)
        self.assertEqual(self.store.status_of(quote.id, now=self.now), STATUS_CONVERTED)

    def test_converted_quote_never_reverts_to_expired(self):
        quote = self._save()
        self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

        much_later = self.now + timedelta(days=60)
        self.assertEqual(self.store.status_of(quote.id, now=much_later), STATUS_CONVERTED)

        with self.assertRaises(QuoteNotPendingError):
            self.store.convert_to_sale(quote.id, catalog=self.catalog, now=much_later)

    def test_expired_quote_cannot_be_converted(self):
        quote = self._save(now=self.now - timedelta(days=8))
        with self.assertRaises(QuoteNotPendingError):
            self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

    def test_conversion_honours_quoted_price(self):
        quote = self._save()
        self.catalog.add(make_product(price="12.00", on_hand=10, product_id=self.product.id, name="Desk Lamp"))

        cart = self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

        self.assertEqual(cart.get_line(self.product.id).price_override, Decimal("10.00"))

    def test_conversion_above_current_on_hand_is_rejected(self):
        quote = self._save()
        self.catalog.add(make_product(price="10.00", on_hand=2, product_id=self.product.id, name="Desk Lamp"))

        with self.assertRaises(StockExceededError):
            self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

        self.assertEqual(self.store.status_of(quote.id, now=self.now), STATUS_PENDING)

    def test_conversion_without_catalog_entry_uses_snapshot(self):
        quote = self._save()
        cart = self.store.convert_to_sale(quote.id, catalog=FakeCatalog(), now=self.now)

        line = cart.get_line(self.product.id)
        self.assertEqual(line.product.name, "Desk Lamp")
        self.assertEqual(line.product.quantity_on_hand, 3)

    def test_delete_in_any_status(self):
        quote = self._save()
        self.store.convert_to_sale(quote.id, catalog=self.catalog, now=self.now)

        self.store.delete(quote.id)

        with self.assertRaises(QuoteNotFoundError):
            self.store.get(quote.id)

    def test_quote_dict_round_trip(self):
        quote = self._save()
        self.assertEqual(Quote.from_dict(quote.to_dict()), quote)
