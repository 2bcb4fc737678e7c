# pos/services/cart_cache.py

"""
REGISTER WRITE-THROUGH CACHE

Purpose:
- Keep a register's live cart, held carts and quotes across process
  restarts using Django's cache framework.
- Share that state between worker processes: with a shared backend
  (CACHE_URL) every worker re-reads the register at the start of a request.

Rules:
- Every read or write failure is logged and ignored; callers keep their
  in-process state exactly as if the cache were absent.
- Values are JSON-safe dicts produced by the engine's to_dict() methods.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from django.core.cache import caches

from pos.domain import Cart
from pos.services.hold_registry import HeldTransaction
from quotes.domain import Quote

logger = logging.getLogger(__name__)

KEY_PREFIX = "pos:register"


def get_register_cache_key(register_id: str, part: str) -> str:
    return f"{KEY_PREFIX}:{register_id}:{part}"


class CartCache:
    def __init__(self, register_id: str, *, alias: str = "default", timeout: Optional[int] = None, enabled: bool = True):
        self.register_id = str(register_id)
        self.alias = alias
        self.timeout = timeout
        self.enabled = enabled

    def _cache(self):
        return caches[self.alias]

    def _get(self, part: str):
        if not self.enabled:
            return None
        try:
            return self._cache().get(get_register_cache_key(self.register_id, part))
        except Exception as exc:
            logger.warning(
                "Register cache read failed",
                extra={"register_id": self.register_id, "part": part, "error": str(exc)},
            )
            return None

    def _set(self, part: str, value) -> None:
        if not self.enabled:
            return
        try:
            self._cache().set(get_register_cache_key(self.register_id, part), value, self.timeout)
        except Exception as exc:
            logger.warning(
                "Register cache write failed",
                extra={"register_id": self.register_id, "part": part, "error": str(exc)},
            )

    # --------------------------------------------------
    # LOAD
    # --------------------------------------------------

    def load_cart(self) -> Optional[Cart]:
        data = self._get("cart")
        if not data:
            return None
        try:
            return Cart.from_dict(data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Discarding unreadable cached cart", extra={"register_id": self.register_id, "error": str(exc)})
            return None

    def load_holds(self) -> Optional[List[HeldTransaction]]:
        """None when nothing is cached, so callers can keep what they have."""
        raw = self._get("holds")
        if raw is None:
            return None
        entries = []
        for data in raw:
            try:
                entries.append(HeldTransaction.from_dict(data))
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("Discarding unreadable cached hold", extra={"register_id": self.register_id, "error": str(exc)})
        return entries

    def load_quotes(self) -> Optional[List[Quote]]:
        raw = self._get("quotes")
        if raw is None:
            return None
        entries = []
        for data in raw:
            try:
                entries.append(Quote.from_dict(data))
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("Discarding unreadable cached quote", extra={"register_id": self.register_id, "error": str(exc)})
        return entries

    # --------------------------------------------------
    # STORE
    # --------------------------------------------------

    def store_cart(self, cart: Cart) -> None:
        self._set("cart", cart.to_dict())

    def store_holds(self, entries) -> None:
        self._set("holds", [entry.to_dict() for entry in entries])

    def store_quotes(self, entries) -> None:
        self._set("quotes", [entry.to_dict() for entry in entries])
