# pos/services/registry.py

"""
REGISTER SESSION REGISTRY

Keeps one RegisterSession per register id, bounded and least recently used
first out. Every lookup refreshes the session from the register cache so
workers sharing that cache see each other's writes.
Sessions are built from settings.POS_ENGINE (collaborator classes are
dotted paths loaded with import_string).
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional

from django.conf import settings
from django.utils.module_loading import import_string

from pos.services.cart_cache import CartCache
from pos.services.session import RegisterSession
from sales.services.sale_manager import SaleLifecycleManager

logger = logging.getLogger(__name__)

DEFAULT_REGISTER_ID = "main"
DEFAULT_MAX_SESSIONS = 256


def engine_setting(name: str, default=None):
    return getattr(settings, "POS_ENGINE", {}).get(name, default)


def _collaborator(name: str):
    return import_string(engine_setting(name))()


def build_sale_manager() -> SaleLifecycleManager:
    return SaleLifecycleManager(_collaborator("SALE_BACKEND"))


def build_register_session(register_id: str) -> RegisterSession:
    cache = CartCache(
        register_id,
        alias=engine_setting("CART_CACHE_ALIAS", "default"),
        timeout=engine_setting("CART_CACHE_TIMEOUT"),
        enabled=bool(engine_setting("CART_CACHE_ENABLED", False)),
    )
    return RegisterSession(
        register_id,
        catalog=_collaborator("PRODUCT_CATALOG"),
        customers=_collaborator("CUSTOMER_DIRECTORY"),
        coupons=_collaborator("COUPON_VALIDATOR"),
        tax_rules=_collaborator("TAX_RULE_PROVIDER"),
        sale_manager=build_sale_manager(),
        cache=cache,
        quote_validity_days=engine_setting("QUOTE_VALIDITY_DAYS", 7),
        tax_region=engine_setting("TAX_REGION", ""),
    )


class SessionRegistry:
    """
    At most max_sessions registers are kept; the least recently used one is
    dropped first, unless it is submitting a sale. A dropped register is
    rebuilt from the register cache on its next request.
    """

    def __init__(
        self,
        factory: Optional[Callable[[str], RegisterSession]] = None,
        *,
        max_sessions: Optional[int] = None,
    ):
        self._factory = factory or build_register_session
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, RegisterSession]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_sessions(self) -> int:
        if self._max_sessions is not None:
            return int(self._max_sessions)
        return int(engine_setting("MAX_REGISTER_SESSIONS", DEFAULT_MAX_SESSIONS))

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, register_id) -> bool:
        return str(register_id) in self._sessions

    def get(self, register_id: str = DEFAULT_REGISTER_ID) -> RegisterSession:
        register_id = str(register_id or DEFAULT_REGISTER_ID)
        with self._lock:
            session = self._sessions.get(register_id)
            if session is None:
                session = self._factory(register_id)
                self._sessions[register_id] = session
                logger.info("Register session opened", extra={"register_id": register_id})
            else:
                self._sessions.move_to_end(register_id)
            self._evict(keep=register_id)

        session.refresh()
        return session

    def _evict(self, *, keep: str) -> None:
        limit = max(1, self.max_sessions)
        for register_id in list(self._sessions):
            if len(self._sessions) <= limit:
                return
            if register_id == keep or self._sessions[register_id].checkout.is_finalizing:
                continue
            del self._sessions[register_id]
            logger.info("Register session evicted", extra={"register_id": register_id})

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


sessions = SessionRegistry()


def get_register_session(register_id: str = DEFAULT_REGISTER_ID) -> RegisterSession:
    return sessions.get(register_id)
