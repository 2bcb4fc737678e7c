# pos/domain/cart.py

"""
CART AGGREGATE

Purpose:
- In-memory state of the sale being assembled at a register.
- Line items unique by product, order-level discount, customer, notes.

Rules:
- Re-adding a product increments its line; lines are never duplicated.
- Every increment passes the stock guard against the product's on-hand count
  at the time of the mutation. A rejected increment leaves the cart untouched.
- The order discount is ONE field: a manual discount or a coupon, never both.
- Totals are never stored here; pos.services.pricing derives them on read.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Union

from catalog.records import CustomerRecord, ProductRecord
from catalog.services.stock_guard import ensure_can_increase

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"
DISCOUNT_KINDS = (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED)

ZERO = Decimal("0.00")


class _Unset:
    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


def _non_negative(value) -> Decimal:
    amount = Decimal(str(value))
    return amount if amount > ZERO else ZERO


def _non_negative_cents(value) -> Decimal:
    from pos.services.pricing import money

    return money(_non_negative(value))


# ============================================================
# ORDER DISCOUNT (tagged variant)
# ============================================================

@dataclass(frozen=True)
class ManualDiscount:
    kind: str
    value: Decimal

    source = "manual"

    def __post_init__(self):
        if self.kind not in DISCOUNT_KINDS:
            raise ValueError(f"Unknown discount kind: {self.kind}")
        object.__setattr__(self, "value", _non_negative(self.value))

    def to_dict(self) -> dict:
        return {"source": self.source, "kind": self.kind, "value": str(self.value)}


@dataclass(frozen=True)
class CouponDiscount:
    code: str
    kind: str
    value: Decimal

    source = "coupon"

    def __post_init__(self):
        if self.kind not in DISCOUNT_KINDS:
            raise ValueError(f"Unknown discount kind: {self.kind}")
        object.__setattr__(self, "code", (self.code or "").strip().upper())
        object.__setattr__(self, "value", _non_negative(self.value))

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "code": self.code,
            "kind": self.kind,
            "value": str(self.value),
        }


OrderDiscount = Union[ManualDiscount, CouponDiscount]


def discount_from_dict(data: Optional[dict]) -> Optional[OrderDiscount]:
    if not data:
        return None
    if data.get("source") == "coupon":
        return CouponDiscount(code=data["code"], kind=data["kind"], value=Decimal(data["value"]))
    return ManualDiscount(kind=data["kind"], value=Decimal(data["value"]))


# ============================================================
# LINE ITEM
# ============================================================

@dataclass
class CartLineItem:
    """
    One product entry in a cart.

    product is the catalog snapshot taken at the last add/increment; it
    carries the catalog price and the on-hand count the guard checks against.
    """

    product: ProductRecord
    quantity: int = 1
    price_override: Optional[Decimal] = None
    item_discount: Decimal = ZERO
    discount_reason: str = ""

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def effective_unit_price(self) -> Decimal:
        from pos.services.pricing import effective_unit_price

        return effective_unit_price(self)

    @property
    def line_total(self) -> Decimal:
        from pos.services.pricing import line_total

        return line_total(self)

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "price_override": None if self.price_override is None else str(self.price_override),
            "item_discount": str(self.item_discount),
            "discount_reason": self.discount_reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        override = data.get("price_override")
        return cls(
            product=ProductRecord.from_dict(data["product"]),
            quantity=int(data["quantity"]),
            price_override=None if override in (None, "") else Decimal(override),
            item_discount=Decimal(data.get("item_discount") or "0.00"),
            discount_reason=data.get("discount_reason") or "",
        )


# ============================================================
# CART
# ============================================================

@dataclass
class Cart:
    lines: List[CartLineItem] = field(default_factory=list)
    customer: Optional[CustomerRecord] = None
    discount: Optional[OrderDiscount] = None
    notes: str = ""

    # Provenance only; a resumed cart equals the cart that was held.
    hold_id: Optional[str] = field(default=None, compare=False)

    # --------------------------------------------------
    # READS
    # --------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def coupon_code(self) -> Optional[str]:
        if isinstance(self.discount, CouponDiscount):
            return self.discount.code
        return None

    @property
    def order_discount(self) -> Optional[ManualDiscount]:
        if isinstance(self.discount, ManualDiscount):
            return self.discount
        return None

    @property
    def categories(self) -> List[str]:
        return [line.product.category for line in self.lines if line.product.category]

    def get_line(self, product_id) -> Optional[CartLineItem]:
        product_id = str(product_id)
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    # --------------------------------------------------
    # MUTATIONS
    # --------------------------------------------------

    def add_item(self, product: ProductRecord, quantity: int = 1) -> CartLineItem:
        """
        Create the product's line or grow it by `quantity`.
        Raises StockExceededError (cart unchanged) when on-hand is exceeded.
        """
        quantity = int(quantity)
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        line = self.get_line(product.id)
        current = line.quantity if line else 0

        ensure_can_increase(product, current_quantity=current, by=quantity)

        if line is None:
            line = CartLineItem(product=product, quantity=quantity)
            self.lines.append(line)
        else:
            line.quantity = current + quantity
            line.product = product

        return line

    def update_quantity(self, product_id, delta: int, *, product: Optional[ProductRecord] = None) -> None:
        """
        Shift a line's quantity by delta; at or below zero the line is removed.
        Increases are guarded against `product` (fresh catalog data) or the
        line's own snapshot.
        """
        delta = int(delta)
        line = self.get_line(product_id)
        if line is None or delta == 0:
            return

        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self.remove_item(product_id)
            return

        if delta > 0:
            current_product = product or line.product
            ensure_can_increase(current_product, current_quantity=line.quantity, by=delta)
            line.product = current_product

        line.quantity = new_quantity

    def remove_item(self, product_id) -> None:
        product_id = str(product_id)
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def set_line_override(
        self,
        product_id,
        *,
        price_override=UNSET,
        item_discount=UNSET,
        discount_reason=UNSET,
    ) -> None:
        line = self.get_line(product_id)
        if line is None:
            return

        if price_override is not UNSET:
            line.price_override = None if price_override is None else _non_negative_cents(price_override)
        if item_discount is not UNSET:
            line.item_discount = ZERO if item_discount is None else _non_negative_cents(item_discount)
        if discount_reason is not UNSET:
            line.discount_reason = (discount_reason or "").strip()

        if line.item_discount == ZERO and discount_reason is UNSET:
            line.discount_reason = ""

    def set_customer(self, customer: Optional[CustomerRecord]) -> None:
        self.customer = customer

    def set_order_discount(self, discount: Optional[ManualDiscount]) -> None:
        """
        Replace the order discount with a manual one (drops any coupon).
        None removes a manual discount and leaves a coupon alone.
        """
        if discount is None:
            if isinstance(self.discount, ManualDiscount):
                self.discount = None
            return
        self.discount = discount

    def set_coupon(self, coupon: Optional[CouponDiscount]) -> None:
        """
        Replace the order discount with a resolved coupon (drops any manual
        discount). None removes a coupon and leaves a manual discount alone.
        """
        if coupon is None:
            if isinstance(self.discount, CouponDiscount):
                self.discount = None
            return
        self.discount = coupon

    def set_notes(self, text: Optional[str]) -> None:
        self.notes = text or ""

    def clear(self) -> None:
        self.lines = []
        self.customer = None
        self.discount = None
        self.notes = ""
        self.hold_id = None

    # --------------------------------------------------
    # SNAPSHOTS
    # --------------------------------------------------

    def snapshot(self) -> "Cart":
        """Deep, independent copy; later mutations never reach it."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "customer": self.customer.to_dict() if self.customer else None,
            "discount": self.discount.to_dict() if self.discount else None,
            "notes": self.notes,
            "hold_id": self.hold_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        customer = data.get("customer")
        return cls(
            lines=[CartLineItem.from_dict(line) for line in data.get("lines") or []],
            customer=CustomerRecord.from_dict(customer) if customer else None,
            discount=discount_from_dict(data.get("discount")),
            notes=data.get("notes") or "",
            hold_id=data.get("hold_id"),
        )
