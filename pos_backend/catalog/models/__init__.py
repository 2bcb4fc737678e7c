"""
PATH: catalog/models/__init__.py

Catalog models export surface.
"""

from .coupon import Coupon
from .customer import Customer
from .product import Product
from .tax_rule import TaxRule

__all__ = [
    "Coupon",
    "Customer",
    "Product",
    "TaxRule",
]
