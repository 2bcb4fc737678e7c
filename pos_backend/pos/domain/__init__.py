"""
PATH: pos/domain/__init__.py

Register domain export surface (plain Python, no ORM).
"""

from .cart import (
    DISCOUNT_FIXED,
    DISCOUNT_KINDS,
    DISCOUNT_PERCENTAGE,
    UNSET,
    Cart,
    CartLineItem,
    CouponDiscount,
    ManualDiscount,
    OrderDiscount,
)

__all__ = [
    "DISCOUNT_FIXED",
    "DISCOUNT_KINDS",
    "DISCOUNT_PERCENTAGE",
    "UNSET",
    "Cart",
    "CartLineItem",
    "CouponDiscount",
    "ManualDiscount",
    "OrderDiscount",
]
