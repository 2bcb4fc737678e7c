# pos/services/exceptions.py

"""
REGISTER SERVICE ERRORS

Centralized domain errors for the register engine.

Nothing here is fatal: every error leaves the live cart, the hold registry
and the quote store exactly as they were before the failed call.
"""

from catalog.services.stock_guard import StockExceededError


class RegisterError(Exception):
    """Base exception for register failures."""


class RegisterValidationError(RegisterError):
    """Input rejected locally, before any request was issued."""


class RequestFailedError(RegisterError):
    """
    A collaborator request (sale backend, coupon evaluation, tax rules)
    failed. Local state is unchanged; retrying is the caller's decision.
    """


class EmptyCartError(RegisterError):
    """The operation needs at least one line in the cart."""


class HoldNotFoundError(RegisterError):
    """No held transaction with this id (never held, resumed or removed)."""


class InvalidCheckoutTransitionError(RegisterError):
    """The checkout state machine does not allow this step from its state."""


class CheckoutInProgressError(InvalidCheckoutTransitionError):
    """A create-sale request for this register is still outstanding."""


class InsufficientTenderError(RegisterError):
    """Cash tendered is below the sale total."""

    def __init__(self, *, total, amount_tendered):
        self.total = total
        self.amount_tendered = amount_tendered
        super().__init__(
            f"Amount tendered {amount_tendered} does not cover total {total}"
        )


__all__ = [
    "CheckoutInProgressError",
    "EmptyCartError",
    "HoldNotFoundError",
    "InsufficientTenderError",
    "InvalidCheckoutTransitionError",
    "RegisterError",
    "RegisterValidationError",
    "RequestFailedError",
    "StockExceededError",
]
