# pos/services/hold_registry.py

"""
HOLD REGISTRY

Purpose:
- Suspend a non-empty cart so the register can serve another customer.
- Resume or discard suspended carts later.

Rules:
- Entries are frozen snapshots; the live cart never shares objects with them.
- A held id is consumed by resume or remove; it can never be resumed twice.
- Resuming while the live cart has lines auto-holds the live cart first.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from pos.domain import Cart
from pos.services.exceptions import HoldNotFoundError

logger = logging.getLogger(__name__)

AUTO_HOLD_NOTE = "auto-held when resuming another transaction"


@dataclass(frozen=True)
class HeldTransaction:
    id: str
    cart: Cart
    held_at: datetime
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cart": self.cart.to_dict(),
            "held_at": self.held_at.isoformat(),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HeldTransaction":
        return cls(
            id=data["id"],
            cart=Cart.from_dict(data["cart"]),
            held_at=parse_datetime(data["held_at"]),
            note=data.get("note") or "",
        )


def _new_hold_id() -> str:
    return f"HOLD-{uuid.uuid4().hex[:10].upper()}"


class HoldRegistry:
    """
    Keyed collection of held carts for one register.

    on_change is called after every write so the owner can persist the
    registry; the registry itself has no storage.
    """

    def __init__(self, entries=None, *, on_change: Optional[Callable[[], None]] = None):
        self._entries: Dict[str, HeldTransaction] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry
        self._on_change = on_change

    # --------------------------------------------------
    # READS
    # --------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, held_id) -> bool:
        return held_id in self._entries

    def get(self, held_id) -> HeldTransaction:
        try:
            return self._entries[held_id]
        except KeyError:
            raise HoldNotFoundError(f"Held transaction {held_id} not found") from None

    def list(self) -> List[HeldTransaction]:
        return sorted(self._entries.values(), key=lambda e: e.held_at)

    # --------------------------------------------------
    # WRITES
    # --------------------------------------------------

    def hold(self, cart: Cart, note: str = "", *, now=None) -> Optional[HeldTransaction]:
        """
        Snapshot a non-empty cart. Returns None (and stores nothing) for an
        empty cart. The caller clears its live cart after a successful hold.
        """
        if cart.is_empty:
            logger.info("Hold rejected for empty cart")
            return None

        snapshot = cart.snapshot()
        snapshot.hold_id = None

        entry = HeldTransaction(
            id=_new_hold_id(),
            cart=snapshot,
            held_at=now or timezone.now(),
            note=(note or "").strip(),
        )
        self._entries[entry.id] = entry
        self._changed()

        logger.info(
            "Cart held",
            extra={"hold_id": entry.id, "lines": snapshot.line_count, "note": entry.note},
        )
        return entry

    def resume(self, held_id, *, live_cart: Cart, now=None) -> Tuple[Cart, Optional[HeldTransaction]]:
        """
        Take an entry out of the registry as a fresh live cart.

        Returns (restored_cart, auto_held_entry). auto_held_entry is the
        snapshot of the previous live cart when it had lines, else None.
        """
        if held_id not in self._entries:
            raise HoldNotFoundError(f"Held transaction {held_id} not found")

        auto_held = None
        if not live_cart.is_empty:
            auto_held = self.hold(live_cart, AUTO_HOLD_NOTE, now=now)

        entry = self._entries.pop(held_id)
        self._changed()

        restored = entry.cart.snapshot()
        restored.hold_id = entry.id

        logger.info(
            "Held cart resumed",
            extra={
                "hold_id": entry.id,
                "auto_held_id": auto_held.id if auto_held else None,
            },
        )
        return restored, auto_held

    def remove(self, held_id) -> HeldTransaction:
        try:
            entry = self._entries.pop(held_id)
        except KeyError:
            raise HoldNotFoundError(f"Held transaction {held_id} not found") from None

        self._changed()
        logger.info("Held cart removed", extra={"hold_id": held_id})
        return entry

    def reload(self, entries) -> None:
        """Replace every entry with a stored copy; on_change is not called."""
        self._entries = {entry.id: entry for entry in entries}

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
