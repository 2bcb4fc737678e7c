from .cart import (
    CartSerializer,
    CartTotalsSerializer,
    CustomerSerializer,
    HeldTransactionSerializer,
    ProductSerializer,
)
from .cart_item import CartLineItemSerializer

__all__ = [
    "CartLineItemSerializer",
    "CartSerializer",
    "CartTotalsSerializer",
    "CustomerSerializer",
    "HeldTransactionSerializer",
    "ProductSerializer",
]
