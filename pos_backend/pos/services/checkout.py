# pos/services/checkout.py

"""
CHECKOUT STATE MACHINE

    BUILDING --begin--> METHOD_SELECTION
    METHOD_SELECTION --select cash--> CASH_TENDER
    METHOD_SELECTION --select card/other--> FINALIZING
    CASH_TENDER --confirm (tender >= total)--> FINALIZING
    FINALIZING --backend confirmed--> COMPLETED   (cart cleared)
    FINALIZING --request failed--> FAILED         (cart untouched)
    FAILED --retry--> METHOD_SELECTION

BUILDING / METHOD_SELECTION / CASH_TENDER / FAILED cancel back to BUILDING
without side effects. COMPLETED resets to BUILDING for the next sale.

Rules:
- FINALIZING issues exactly one create-sale request per attempt. Entering it
  while a request is outstanding raises CheckoutInProgressError.
- FINALIZING is never entered with an empty cart; EmptyCartError leaves the
  state where it was.
- change due = amount tendered - total, exact to the cent.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from enum import Enum
from typing import Optional

from pos.services import pricing
from pos.services.exceptions import (
    CheckoutInProgressError,
    EmptyCartError,
    InsufficientTenderError,
    InvalidCheckoutTransitionError,
    RegisterValidationError,
)
from sales.records import PAYMENT_CASH, PAYMENT_METHODS, ConfirmedSale

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    BUILDING = "building"
    METHOD_SELECTION = "method_selection"
    CASH_TENDER = "cash_tender"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


CANCELLABLE_STATES = {
    CheckoutState.BUILDING,
    CheckoutState.METHOD_SELECTION,
    CheckoutState.CASH_TENDER,
    CheckoutState.FAILED,
}


class CheckoutMachine:
    """
    Checkout workflow for one register.

    The machine never owns the cart: every step receives the live cart and
    the tax rate from its session, and a successful finalize clears that
    cart in place.
    """

    def __init__(self, sale_manager):
        self.sale_manager = sale_manager
        self._lock = threading.Lock()
        self._reset_fields()

    def _reset_fields(self):
        self.state = CheckoutState.BUILDING
        self.payment_method: Optional[str] = None
        self.amount_tendered: Optional[Decimal] = None
        self.total: Optional[Decimal] = None
        self.last_sale: Optional[ConfirmedSale] = None
        self.last_error: str = ""

    # --------------------------------------------------
    # READS
    # --------------------------------------------------

    @property
    def is_finalizing(self) -> bool:
        return self.state == CheckoutState.FINALIZING

    @property
    def change_due(self) -> Optional[Decimal]:
        if self.amount_tendered is None or self.total is None:
            return None
        return pricing.change_due(total_amount=self.total, amount_tendered=self.amount_tendered)

    def to_dict(self) -> dict:
        change = self.change_due
        sale = self.last_sale.sale if self.last_sale else None
        return {
            "state": self.state.value,
            "payment_method": self.payment_method,
            "total": None if self.total is None else str(self.total),
            "amount_tendered": None if self.amount_tendered is None else str(self.amount_tendered),
            "change_due": None if change is None else str(change),
            "sale_id": sale.id if sale else None,
            "transaction_number": sale.transaction_number if sale else None,
            "error": self.last_error,
        }

    def _require(self, *states: CheckoutState, action: str) -> None:
        if self.state == CheckoutState.FINALIZING:
            raise CheckoutInProgressError("A sale is already being submitted for this register")
        if self.state not in states:
            raise InvalidCheckoutTransitionError(f"Cannot {action} while checkout is {self.state.value}")

    def _require_items(self, cart) -> None:
        if cart.is_empty:
            raise EmptyCartError("Cannot check out an empty cart")

    def _move(self, state: CheckoutState) -> None:
        logger.info(
            "Checkout transition",
            extra={"from_state": self.state.value, "to_state": state.value},
        )
        self.state = state

    # --------------------------------------------------
    # TRANSITIONS
    # --------------------------------------------------

    def begin(self, cart, *, tax_rate) -> CheckoutState:
        with self._lock:
            self._require(CheckoutState.BUILDING, CheckoutState.COMPLETED, action="begin checkout")
            self._require_items(cart)

            self._reset_fields()
            self.total = pricing.total(cart, tax_rate)
            self._move(CheckoutState.METHOD_SELECTION)
            return self.state

    def select_method(self, payment_method: str, cart, *, tax_rate):
        """
        cash moves to CASH_TENDER and returns the state.
        card/other go straight through FINALIZING and return the ConfirmedSale.
        """
        with self._lock:
            self._require(CheckoutState.METHOD_SELECTION, action="select a payment method")
            if payment_method not in PAYMENT_METHODS:
                raise RegisterValidationError(f"Unsupported payment method: {payment_method}")
            self._require_items(cart)

            self.payment_method = payment_method
            self.total = pricing.total(cart, tax_rate)

            if payment_method == PAYMENT_CASH:
                self.amount_tendered = None
                self._move(CheckoutState.CASH_TENDER)
                return self.state

            self._move(CheckoutState.FINALIZING)

        return self._finalize(cart, tax_rate=tax_rate)

    def tender(self, amount, cart, *, tax_rate) -> Decimal:
        """Record the cash tendered; returns the (possibly negative) change."""
        with self._lock:
            self._require(CheckoutState.CASH_TENDER, action="enter a tender")
            amount = pricing.money(amount)
            if amount < pricing.ZERO:
                raise RegisterValidationError("Amount tendered cannot be negative")

            self.total = pricing.total(cart, tax_rate)
            self.amount_tendered = amount
            return self.change_due

    def confirm_tender(self, cart, *, tax_rate) -> ConfirmedSale:
        with self._lock:
            self._require(CheckoutState.CASH_TENDER, action="confirm the tender")
            if self.amount_tendered is None:
                raise RegisterValidationError("Enter the amount tendered first")
            self._require_items(cart)

            self.total = pricing.total(cart, tax_rate)
            if self.change_due < pricing.ZERO:
                raise InsufficientTenderError(total=self.total, amount_tendered=self.amount_tendered)

            self._move(CheckoutState.FINALIZING)

        return self._finalize(cart, tax_rate=tax_rate)

    def pay_cash(self, amount, cart, *, tax_rate) -> ConfirmedSale:
        self.tender(amount, cart, tax_rate=tax_rate)
        return self.confirm_tender(cart, tax_rate=tax_rate)

    def _finalize(self, cart, *, tax_rate) -> ConfirmedSale:
        """
        Runs with state == FINALIZING, set under the lock by the caller, so a
        second submission for this register is refused until this returns.
        """
        amount_tendered = self.amount_tendered if self.payment_method == PAYMENT_CASH else None

        try:
            confirmed = self.sale_manager.create_sale(
                cart,
                self.payment_method,
                tax_rate=tax_rate,
                amount_tendered=amount_tendered,
            )
        except Exception as exc:
            with self._lock:
                self.last_error = str(exc)
                self._move(CheckoutState.FAILED)
            logger.warning(
                "Checkout failed",
                extra={"payment_method": self.payment_method, "error": str(exc)},
            )
            raise

        with self._lock:
            cart.clear()
            self.last_sale = confirmed
            self.last_error = ""
            self._move(CheckoutState.COMPLETED)

        logger.info(
            "Checkout completed",
            extra={
                "transaction_number": confirmed.sale.transaction_number,
                "payment_method": self.payment_method,
            },
        )
        return confirmed

    def retry(self, cart, *, tax_rate) -> CheckoutState:
        with self._lock:
            self._require(CheckoutState.FAILED, action="retry")
            self._require_items(cart)

            self.payment_method = None
            self.amount_tendered = None
            self.total = pricing.total(cart, tax_rate)
            self._move(CheckoutState.METHOD_SELECTION)
            return self.state

    def cancel(self) -> CheckoutState:
        with self._lock:
            self._require(*CANCELLABLE_STATES, action="cancel")
            if self.state != CheckoutState.BUILDING:
                self._move(CheckoutState.BUILDING)
            self._reset_fields()
            return self.state

    def reset(self) -> CheckoutState:
        with self._lock:
            self._require(CheckoutState.COMPLETED, *CANCELLABLE_STATES, action="reset")
            self._reset_fields()
            return self.state
