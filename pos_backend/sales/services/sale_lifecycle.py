# sales/services/sale_lifecycle.py

"""
SALE LIFECYCLE DOMAIN RULES

A sale is created COMPLETED by the backend and can be reversed exactly once:

    completed -> voided    (same-day cancellation, reason required)
    completed -> returned  (goods brought back, reason required)

Both reversals restore stock for every sold line and are terminal; a voided
sale cannot be returned and vice versa.

Each reversal stamps its own timestamp and reason column (see REVERSALS);
the status, that pair and nothing else may change on a stored sale.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- Works on SaleRecord values and Sale rows alike (anything with .id/.status)
"""

from dataclasses import dataclass
from typing import Tuple

STATUS_COMPLETED = "completed"
STATUS_VOIDED = "voided"
STATUS_RETURNED = "returned"

SALE_STATUSES = (STATUS_COMPLETED, STATUS_VOIDED, STATUS_RETURNED)

# ============================================================
# DOMAIN ERRORS
# ============================================================


class SaleLifecycleError(Exception):
    pass


class InvalidSaleTransitionError(SaleLifecycleError):
    pass


# ============================================================
# REVERSALS
# ============================================================


@dataclass(frozen=True)
class Reversal:
    status: str
    timestamp_field: str
    reason_field: str
    backend_method: str

    @property
    def update_fields(self) -> Tuple[str, str, str]:
        return ("status", self.timestamp_field, self.reason_field)


REVERSALS = {
    STATUS_VOIDED: Reversal(STATUS_VOIDED, "voided_at", "void_reason", "void_sale"),
    STATUS_RETURNED: Reversal(STATUS_RETURNED, "returned_at", "return_reason", "return_sale"),
}

TERMINAL_STATES = set(REVERSALS)

ALLOWED_TRANSITIONS = {
    STATUS_COMPLETED: set(REVERSALS),
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def reversal_for(target_status: str) -> Reversal:
    try:
        return REVERSALS[target_status]
    except KeyError:
        raise InvalidSaleTransitionError(f"'{target_status}' is not a reversal status") from None


def validate_transition(*, sale, target_status: str) -> Reversal:
    reversal = reversal_for(target_status)
    if not can_transition(
        from_status=sale.status,
        to_status=target_status,
    ):
        raise InvalidSaleTransitionError(
            f"Sale {sale.id} is {sale.status} and cannot be {target_status}; "
            f"only {STATUS_COMPLETED} sales can be reversed, once"
        )
    return reversal
