# quotes/services/quote_store.py

"""
QUOTE STORE

Purpose:
- Save the live cart as a priced quote that expires after a validity window.
- List quotes with their status re-derived on every read.
- Convert a pending quote back into a live cart (terminal for the quote).

Rules:
- Entries are immutable snapshots; conversion replaces the entry with a
  converted copy instead of editing it.
- Delete works in any status.
- A conversion the stock guard rejects leaves the quote pending.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import timedelta
from typing import Callable, Dict, List, Optional

from django.utils import timezone

from catalog.records import CustomerRecord, ProductRecord
from catalog.services.stock_guard import ensure_can_increase
from pos.domain import DISCOUNT_FIXED, Cart, CartLineItem, ManualDiscount
from pos.services.pricing import ZERO, CartTotals
from quotes.domain import STATUS_PENDING, Quote, QuoteCustomer, QuoteItem
from quotes.services.exceptions import QuoteNotFoundError, QuoteNotPendingError

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_DAYS = 7


def _new_quote_id(now) -> str:
    return f"QT-{now.strftime('%Y%m%d')}-{uuid.uuid4().hex[:6].upper()}"


def quote_from_cart(cart: Cart, *, totals: CartTotals, now, validity_days: int) -> Quote:
    customer = None
    if cart.customer is not None:
        customer = QuoteCustomer(id=cart.customer.id, name=cart.customer.name)

    items = tuple(
        QuoteItem(
            product_id=line.product_id,
            name=line.product.name,
            sku=line.product.sku,
            quantity=line.quantity,
            unit_price=line.effective_unit_price,
            category=line.product.category,
        )
        for line in cart.lines
    )

    return Quote(
        id=_new_quote_id(now),
        items=items,
        customer=customer,
        subtotal=totals.subtotal,
        discount=totals.discount,
        tax=totals.tax,
        total=totals.total,
        created_at=now,
        expires_at=now + timedelta(days=validity_days),
        stored_status=STATUS_PENDING,
        notes=cart.notes,
    )


def cart_from_quote(quote: Quote, *, catalog=None) -> Cart:
    """
    Hydrate a live cart from a quote snapshot.

    Quoted prices are honoured: when the catalog price moved since the quote
    was taken, the line carries the quoted price as an override. Products the
    catalog no longer knows keep their snapshot (with the quoted quantity as
    the only stock the guard will allow).

    Every line passes the stock guard against the catalog's current on-hand
    count; StockExceededError is raised before anything is built.
    """
    lines = []
    for item in quote.items:
        product = catalog.get_product(item.product_id) if catalog is not None else None

        if product is None:
            product = ProductRecord(
                id=item.product_id,
                name=item.name,
                sku=item.sku,
                unit_price=item.unit_price,
                quantity_on_hand=item.quantity,
                category=item.category,
            )

        ensure_can_increase(product, current_quantity=0, by=item.quantity)

        override = None if product.unit_price == item.unit_price else item.unit_price
        lines.append(CartLineItem(product=product, quantity=item.quantity, price_override=override))

    customer = None
    if quote.customer is not None:
        customer = CustomerRecord(id=quote.customer.id, name=quote.customer.name)

    discount = None
    if quote.discount > ZERO:
        discount = ManualDiscount(kind=DISCOUNT_FIXED, value=quote.discount)

    return Cart(lines=lines, customer=customer, discount=discount, notes=quote.notes)


class QuoteStore:
    """
    Keyed collection of quotes for one register.
    on_change is called after every write (write-through persistence hook).
    """

    def __init__(
        self,
        entries=None,
        *,
        validity_days: int = DEFAULT_VALIDITY_DAYS,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._entries: Dict[str, Quote] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry
        self.validity_days = int(validity_days)
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, quote_id) -> bool:
        return quote_id in self._entries

    def all(self) -> List[Quote]:
        """Stored entries as-is (no status refresh)."""
        return list(self._entries.values())

    def get(self, quote_id) -> Quote:
        try:
            return self._entries[quote_id]
        except KeyError:
            raise QuoteNotFoundError(f"Quote {quote_id} not found") from None

    def save_as_quote(self, cart: Cart, *, totals: CartTotals, now=None) -> Quote:
        """
        Snapshot cart + totals as a pending quote. The caller clears its live
        cart afterwards.
        """
        now = now or timezone.now()
        quote = quote_from_cart(cart, totals=totals, now=now, validity_days=self.validity_days)
        self._entries[quote.id] = quote
        self._changed()

        logger.info(
            "Quote saved",
            extra={"quote_id": quote.id, "total": str(quote.total), "expires_at": quote.expires_at.isoformat()},
        )
        return quote

    def list_quotes(self, query: str = "", *, now=None) -> List[Quote]:
        """
        Every entry with its status re-derived against `now`, newest first.
        Derived statuses are written back so stored_status mirrors the read.
        """
        now = now or timezone.now()

        refreshed = False
        for quote_id, quote in list(self._entries.items()):
            status = quote.status_at(now)
            if status != quote.stored_status:
                self._entries[quote_id] = replace(quote, stored_status=status)
                refreshed = True
        if refreshed:
            self._changed()

        return sorted(
            (q for q in self._entries.values() if q.matches(query)),
            key=lambda q: q.created_at,
            reverse=True,
        )

    def status_of(self, quote_id, *, now=None) -> str:
        return self.get(quote_id).status_at(now or timezone.now())

    def convert_to_sale(self, quote_id, *, catalog=None, now=None) -> Cart:
        now = now or timezone.now()
        quote = self.get(quote_id)

        status = quote.status_at(now)
        if status != STATUS_PENDING:
            raise QuoteNotPendingError(f"Quote {quote_id} is {status} and cannot be converted")

        cart = cart_from_quote(quote, catalog=catalog)

        self._entries[quote_id] = quote.mark_converted(now=now)
        self._changed()

        logger.info("Quote converted", extra={"quote_id": quote_id, "lines": cart.line_count})
        return cart

    def delete(self, quote_id) -> Quote:
        try:
            quote = self._entries.pop(quote_id)
        except KeyError:
            raise QuoteNotFoundError(f"Quote {quote_id} not found") from None

        self._changed()
        logger.info("Quote deleted", extra={"quote_id": quote_id})
        return quote

    def reload(self, entries) -> None:
        self._entries = {entry.id: entry for entry in entries}

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
