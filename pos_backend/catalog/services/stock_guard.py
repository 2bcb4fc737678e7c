# catalog/services/stock_guard.py

"""
STOCK GUARD

Purpose:
- Decide whether a cart line may grow by one more unit.

Rules:
- Checked at every increment (add-to-cart, quantity +1), not only at checkout.
- Decrements and removals are always permitted.
- On-hand counts come from the product catalog at the time of mutation.
"""

from __future__ import annotations

import logging

from catalog.records import ProductRecord

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class StockExceededError(Exception):
    """
    The requested quantity is above what the catalog reports on hand.
    The mutation was not applied.
    """

    def __init__(self, *, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, requested: {requested}"
        )


# ============================================================
# GUARD
# ============================================================

def can_increment(product: ProductRecord, current_quantity: int) -> bool:
    return int(current_quantity) < int(product.quantity_on_hand)


def ensure_can_increase(product: ProductRecord, *, current_quantity: int, by: int = 1) -> None:
    """
    Raise StockExceededError unless current_quantity + by fits on hand.
    Applies can_increment once per requested unit.
    """
    for step in range(int(by)):
        if not can_increment(product, int(current_quantity) + step):
            logger.info(
                "Stock guard rejected increment",
                extra={
                    "product_id": product.id,
                    "available": product.quantity_on_hand,
                    "requested": int(current_quantity) + int(by),
                },
            )
            raise StockExceededError(
                product_id=product.id,
                available=int(product.quantity_on_hand),
                requested=int(current_quantity) + int(by),
            )
