# pos/tests/test_pricing.py

import random
from decimal import Decimal

from django.test import SimpleTestCase

from pos.domain import DISCOUNT_FIXED, DISCOUNT_PERCENTAGE, Cart, CartLineItem, ManualDiscount
from pos.services import pricing
from pos.tests.factories import make_product


class PricingTests(SimpleTestCase):
    """
    GUARANTEES:
    - Totals follow subtotal -> discount -> tax -> total
    - Derived amounts are exact cents
    - Functions are pure (same cart, same answer)
    """

    def _cart(self, *lines, discount=None):
        cart = Cart(discount=discount)
        for price, qty in lines:
            cart.lines.append(CartLineItem(product=make_product(price=price), quantity=qty))
        return cart

    # --------------------------------------------------
    # Reference scenario
    # --------------------------------------------------

    def test_fixed_discount_and_tax_scenario(self):
        cart = self._cart(
            ("10.00", 3),
            discount=ManualDiscount(kind=DISCOUNT_FIXED, value=Decimal("5.00")),
        )

        totals = pricing.compute_totals(cart, Decimal("0.13"))

        self.assertEqual(totals.subtotal, Decimal("30.00"))
        self.assertEqual(totals.discount, Decimal("5.00"))
        self.assertEqual(totals.discounted_subtotal, Decimal("25.00"))
        self.assertEqual(totals.tax, Decimal("3.25"))
        self.assertEqual(totals.total, Decimal("28.25"))
        self.assertEqual(totals.item_count, 3)

    def test_percentage_discount(self):
        cart = self._cart(
            ("19.99", 2),
            discount=ManualDiscount(kind=DISCOUNT_PERCENTAGE, value=Decimal("10")),
        )

        self.assertEqual(pricing.subtotal(cart), Decimal("39.98"))
        # 3.998 rounds half-up to 4.00
        self.assertEqual(pricing.order_discount_amount(cart), Decimal("4.00"))
        self.assertEqual(pricing.discounted_subtotal(cart), Decimal("35.98"))

    def test_fixed_discount_is_capped_at_subtotal(self):
        cart = self._cart(
            ("4.00", 1),
            discount=ManualDiscount(kind=DISCOUNT_FIXED, value=Decimal("50.00")),
        )

        self.assertEqual(pricing.order_discount_amount(cart), Decimal("4.00"))
        self.assertEqual(pricing.discounted_subtotal(cart), Decimal("0.00"))
        self.assertEqual(pricing.total(cart, Decimal("0.13")), Decimal("0.00"))

    def test_empty_cart_totals_are_zero(self):
        totals = pricing.compute_totals(Cart(), Decimal("0.13"))
        self.assertEqual(totals.total, Decimal("0.00"))
        self.assertEqual(totals.item_count, 0)

    # --------------------------------------------------
    # Line prices
    # --------------------------------------------------

    def test_override_replaces_catalog_price(self):
        line = CartLineItem(product=make_product(price="10.00"), quantity=2, price_override=Decimal("7.50"))
        self.assertEqual(pricing.effective_unit_price(line), Decimal("7.50"))
        self.assertEqual(pricing.line_total(line), Decimal("15.00"))

    def test_item_discount_is_per_unit(self):
        line = CartLineItem(product=make_product(price="10.00"), quantity=3, item_discount=Decimal("1.25"))
        self.assertEqual(pricing.effective_unit_price(line), Decimal("8.75"))
        self.assertEqual(pricing.line_total(line), Decimal("26.25"))

    def test_effective_price_never_negative(self):
        line = CartLineItem(
            product=make_product(price="3.00"),
            quantity=2,
            price_override=Decimal("2.00"),
            item_discount=Decimal("9.00"),
        )
        self.assertEqual(pricing.effective_unit_price(line), Decimal("0.00"))
        self.assertEqual(pricing.line_total(line), Decimal("0.00"))

    def test_sub_cent_override_keeps_subtotal_equal_to_line_sum(self):
        line = CartLineItem(product=make_product(price="1.00"), quantity=3, price_override=Decimal("0.333"))
        cart = Cart(lines=[line])

        self.assertEqual(pricing.effective_unit_price(line), Decimal("0.33"))
        self.assertEqual(pricing.line_total(line), Decimal("0.99"))
        self.assertEqual(pricing.subtotal(cart), pricing.line_total(line))

    def test_change_due_is_exact(self):
        self.assertEqual(
            pricing.change_due(total_amount=Decimal("28.25"), amount_tendered=Decimal("30.00")),
            Decimal("1.75"),
        )
        self.assertEqual(
            pricing.change_due(total_amount=Decimal("28.25"), amount_tendered=Decimal("28.25")),
            Decimal("0.00"),
        )

    # --------------------------------------------------
    # Properties over random carts
    # --------------------------------------------------

    def _random_cart(self, rng):
        cart = Cart()
        for _ in range(rng.randint(0, 6)):
            line = CartLineItem(
                product=make_product(price=f"{rng.randint(0, 5000) / 100:.2f}"),
                quantity=rng.randint(1, 9),
            )
            if rng.random() < 0.3:
                line.price_override = Decimal(rng.randint(0, 50000)) / Decimal(1000)
            if rng.random() < 0.3:
                line.item_discount = Decimal(rng.randint(0, 80000)) / Decimal(1000)
            cart.lines.append(line)

        if rng.random() < 0.5:
            kind = rng.choice([DISCOUNT_FIXED, DISCOUNT_PERCENTAGE])
            value = rng.randint(0, 100) if kind == DISCOUNT_PERCENTAGE else rng.randint(0, 20000) / 100
            cart.discount = ManualDiscount(kind=kind, value=Decimal(str(value)))
        return cart

    def test_properties_hold_for_random_carts(self):
        rng = random.Random(20240607)
        rate = Decimal("0.13")

        for _ in range(300):
            cart = self._random_cart(rng)

            first = pricing.compute_totals(cart, rate)
            second = pricing.compute_totals(cart, rate)
            self.assertEqual(first, second)

            self.assertEqual(first.subtotal, sum((pricing.line_total(line) for line in cart.lines), Decimal("0.00")))

            for line in cart.lines:
                self.assertGreaterEqual(pricing.effective_unit_price(line), Decimal("0"))

            self.assertLessEqual(first.discount, first.subtotal)
            self.assertGreaterEqual(first.discounted_subtotal, Decimal("0"))
            self.assertEqual(first.total, first.discounted_subtotal + first.tax)
            self.assertEqual(first.tax, first.tax.quantize(pricing.TWOPLACES))
