# pos/services/session.py

"""
REGISTER SESSION

One register (terminal) and everything it owns:
- the single live cart
- its hold registry and quote store
- its checkout state machine

Rules:
- Cart mutations run one at a time (RLock) and are refused while a sale is
  being submitted (checkout FINALIZING).
- Collaborator failures (catalog, directory, coupons, tax rules) surface as
  RequestFailedError; local state is left as it was.
- Every write is pushed through to the register cache; cache failures are
  ignored. refresh() re-reads what other workers wrote there.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import List, Optional

from catalog.services.interfaces import CouponValidator, CustomerDirectory, ProductCatalog, TaxRuleProvider
from catalog.services.stock_guard import StockExceededError
from pos.domain import Cart, CouponDiscount, ManualDiscount
from pos.services import pricing
from pos.services.cart_cache import CartCache
from pos.services.checkout import CheckoutMachine, CheckoutState
from pos.services.exceptions import (
    CheckoutInProgressError,
    EmptyCartError,
    RegisterError,
    RegisterValidationError,
    RequestFailedError,
)
from pos.services.hold_registry import HeldTransaction, HoldRegistry
from pos.services.tax import resolve_tax_rate
from quotes.domain import Quote
from quotes.services.quote_store import DEFAULT_VALIDITY_DAYS, QuoteStore
from sales.services.sale_manager import SaleLifecycleManager

logger = logging.getLogger(__name__)


class RegisterSession:
    def __init__(
        self,
        register_id: str,
        *,
        catalog: ProductCatalog,
        customers: CustomerDirectory,
        coupons: CouponValidator,
        tax_rules: TaxRuleProvider,
        sale_manager: SaleLifecycleManager,
        cache: Optional[CartCache] = None,
        quote_validity_days: int = DEFAULT_VALIDITY_DAYS,
        tax_region: str = "",
    ):
        self.register_id = str(register_id)
        self.catalog = catalog
        self.customers = customers
        self.coupons = coupons
        self.tax_rules = tax_rules
        self.tax_region = tax_region or ""

        self.cache = cache or CartCache(self.register_id, enabled=False)
        self._lock = threading.RLock()

        self.cart: Cart = self.cache.load_cart() or Cart()
        self.holds = HoldRegistry(self.cache.load_holds(), on_change=self._store_holds)
        self.quotes = QuoteStore(
            self.cache.load_quotes(),
            validity_days=quote_validity_days,
            on_change=self._store_quotes,
        )
        self.checkout = CheckoutMachine(sale_manager)

    # --------------------------------------------------
    # INTERNALS
    # --------------------------------------------------

    def _store_holds(self) -> None:
        self.cache.store_holds(self.holds.list())

    def _store_quotes(self) -> None:
        self.cache.store_quotes(self.quotes.all())

    def _store_cart(self) -> None:
        self.cache.store_cart(self.cart)

    def _request(self, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (RegisterError, StockExceededError):
            raise
        except Exception as exc:
            logger.warning(
                "Collaborator request failed",
                extra={"register_id": self.register_id, "call": getattr(func, "__qualname__", str(func)), "error": str(exc)},
            )
            raise RequestFailedError(str(exc) or "Request failed") from exc

    @contextmanager
    def _mutating(self):
        with self._lock:
            if self.checkout.is_finalizing:
                raise CheckoutInProgressError("The cart is locked while a sale is being submitted")
            yield self.cart
            self._store_cart()

    def _restart_checkout(self) -> None:
        if self.checkout.state != CheckoutState.BUILDING:
            self.checkout.reset()

    def _swap_cart(self, cart: Cart) -> None:
        """Replace the live cart; any checkout in progress starts over."""
        self._restart_checkout()
        self.cart = cart

    def _product(self, product_id):
        product = self._request(self.catalog.get_product, str(product_id))
        if product is None:
            raise RegisterValidationError(f"Product {product_id} not found")
        return product

    # --------------------------------------------------
    # SHARED STATE
    # --------------------------------------------------

    def refresh(self) -> None:
        """
        Pick up cart, holds and quotes written by other workers sharing the
        register cache. Skipped while a sale is being submitted; parts the
        cache does not hold keep their in-process value.
        """
        if not self.cache.enabled:
            return

        with self._lock:
            if self.checkout.is_finalizing:
                return

            cart = self.cache.load_cart()
            if cart is not None and cart != self.cart:
                self._swap_cart(cart)

            holds = self.cache.load_holds()
            if holds is not None:
                self.holds.reload(holds)

            quotes = self.cache.load_quotes()
            if quotes is not None:
                self.quotes.reload(quotes)

    # --------------------------------------------------
    # CATALOG / DIRECTORY
    # --------------------------------------------------

    def list_products(self):
        return self._request(self.catalog.list_products)

    def search_customers(self, query: str):
        return self._request(self.customers.search, query or "")

    # --------------------------------------------------
    # CART
    # --------------------------------------------------

    def add_item(self, product_id, quantity: int = 1):
        product = self._product(product_id)
        with self._mutating() as cart:
            return cart.add_item(product, quantity)

    def update_quantity(self, product_id, delta: int) -> None:
        delta = int(delta)
        fresh = None
        if delta > 0 and self.cart.get_line(product_id) is not None:
            fresh = self._request(self.catalog.get_product, str(product_id))
        with self._mutating() as cart:
            cart.update_quantity(product_id, delta, product=fresh)

    def remove_item(self, product_id) -> None:
        with self._mutating() as cart:
            cart.remove_item(product_id)

    def set_line_override(self, product_id, **changes) -> None:
        with self._mutating() as cart:
            cart.set_line_override(product_id, **changes)

    def set_customer(self, customer_id) -> None:
        customer = None
        if customer_id:
            customer = self._request(self.customers.get_customer, str(customer_id))
            if customer is None:
                raise RegisterValidationError(f"Customer {customer_id} not found")
        with self._mutating() as cart:
            cart.set_customer(customer)

    def set_order_discount(self, kind: Optional[str], value=None) -> None:
        discount = None
        if kind:
            try:
                discount = ManualDiscount(kind=kind, value=Decimal(str(value or "0")))
            except (ValueError, ArithmeticError) as exc:
                raise RegisterValidationError(str(exc)) from exc
        with self._mutating() as cart:
            cart.set_order_discount(discount)

    def apply_coupon(self, code: str) -> CouponDiscount:
        code = (code or "").strip()
        if not code:
            raise RegisterValidationError("Coupon code is required")

        evaluation = self._request(self.coupons.evaluate, code, pricing.subtotal(self.cart))
        if not evaluation.valid:
            raise RegisterValidationError(evaluation.message or f"Coupon '{code}' is not valid")

        coupon = CouponDiscount(code=code, kind=evaluation.discount_type, value=evaluation.discount)
        with self._mutating() as cart:
            cart.set_coupon(coupon)

        logger.info("Coupon applied", extra={"register_id": self.register_id, "code": coupon.code})
        return coupon

    def clear_coupon(self) -> None:
        with self._mutating() as cart:
            cart.set_coupon(None)

    def set_notes(self, text: str) -> None:
        with self._mutating() as cart:
            cart.set_notes(text)

    def clear_cart(self) -> None:
        with self._mutating() as cart:
            cart.clear()
            self._restart_checkout()

    # --------------------------------------------------
    # TOTALS
    # --------------------------------------------------

    def tax_rate(self) -> Decimal:
        rules = self._request(self.tax_rules.list_tax_rules)
        return resolve_tax_rate(rules, self.cart, region=self.tax_region)

    def totals(self) -> pricing.CartTotals:
        with self._lock:
            return pricing.compute_totals(self.cart, self.tax_rate())

    # --------------------------------------------------
    # HOLDS
    # --------------------------------------------------

    def hold(self, note: str = "") -> Optional[HeldTransaction]:
        with self._mutating() as cart:
            entry = self.holds.hold(cart, note)
            if entry is not None:
                cart.clear()
                self._restart_checkout()
            return entry

    def resume(self, hold_id):
        """Returns (auto_held_entry or None); the resumed cart becomes live."""
        with self._mutating():
            restored, auto_held = self.holds.resume(hold_id, live_cart=self.cart)
            self._swap_cart(restored)
            return auto_held

    def delete_hold(self, hold_id) -> HeldTransaction:
        with self._lock:
            return self.holds.remove(hold_id)

    def list_holds(self) -> List[HeldTransaction]:
        with self._lock:
            return self.holds.list()

    # --------------------------------------------------
    # QUOTES
    # --------------------------------------------------

    def save_as_quote(self) -> Quote:
        with self._mutating() as cart:
            if cart.is_empty:
                raise EmptyCartError("Cannot quote an empty cart")
            totals = pricing.compute_totals(cart, self.tax_rate())
            quote = self.quotes.save_as_quote(cart, totals=totals)
            cart.clear()
            self._restart_checkout()
            return quote

    def list_quotes(self, query: str = "") -> List[Quote]:
        with self._lock:
            return self.quotes.list_quotes(query)

    def convert_quote(self, quote_id):
        """
        Quote becomes the live cart. A non-empty live cart is auto-held first.
        Returns the auto-held entry or None.
        """
        with self._mutating():
            converted = self._request(self.quotes.convert_to_sale, quote_id, catalog=self.catalog)

            auto_held = None
            if not self.cart.is_empty:
                auto_held = self.holds.hold(self.cart, "auto-held when converting a quote")

            self._swap_cart(converted)
            return auto_held

    def delete_quote(self, quote_id) -> Quote:
        with self._lock:
            return self.quotes.delete(quote_id)

    # --------------------------------------------------
    # CHECKOUT
    # --------------------------------------------------

    def _checkout_inputs(self):
        with self._lock:
            return self.cart, self.tax_rate()

    def begin_checkout(self):
        cart, rate = self._checkout_inputs()
        return self.checkout.begin(cart, tax_rate=rate)

    def select_payment_method(self, payment_method: str):
        cart, rate = self._checkout_inputs()
        try:
            return self.checkout.select_method(payment_method, cart, tax_rate=rate)
        finally:
            self._store_cart()

    def tender(self, amount) -> Decimal:
        cart, rate = self._checkout_inputs()
        return self.checkout.tender(amount, cart, tax_rate=rate)

    def confirm_tender(self):
        cart, rate = self._checkout_inputs()
        try:
            return self.checkout.confirm_tender(cart, tax_rate=rate)
        finally:
            self._store_cart()

    def retry_checkout(self):
        cart, rate = self._checkout_inputs()
        return self.checkout.retry(cart, tax_rate=rate)

    def cancel_checkout(self):
        return self.checkout.cancel()

    def reset_checkout(self):
        return self.checkout.reset()
