# pos/services/pricing.py

"""
PRICING & TAX CALCULATOR

Pure functions over a Cart. No I/O, no mutation, no clock.

Order of operations:
1) effective unit price = max(0, (override or catalog price) - item discount),
                          rounded half-up to cents
2) line total           = effective unit price * quantity
3) subtotal             = sum of line totals
4) order discount       = percentage of subtotal, or fixed amount capped at subtotal
5) discounted subtotal  = max(0, subtotal - order discount)
6) tax                  = discounted subtotal * tax rate   (rate is a fraction: 0.13)
7) total                = discounted subtotal + tax

Money is Decimal. Unit prices, the percentage discount and tax are rounded
half-up to cents, so every line total and every sum is an exact cent value.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def money(value) -> Decimal:
    if value is None or value == "":
        return ZERO
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def effective_unit_price(item) -> Decimal:
    base = item.price_override if item.price_override is not None else item.product.unit_price
    price = money(Decimal(base) - Decimal(item.item_discount or ZERO))
    return price if price > ZERO else ZERO


def line_total(item) -> Decimal:
    return effective_unit_price(item) * int(item.quantity)


def subtotal(cart) -> Decimal:
    return money(sum((line_total(line) for line in cart.lines), ZERO))


def order_discount_amount(cart) -> Decimal:
    discount = cart.discount
    if discount is None:
        return ZERO

    base = subtotal(cart)

    if discount.kind == "percentage":
        amount = money(base * Decimal(discount.value) / HUNDRED)
    else:
        amount = money(discount.value)

    return min(amount, base)


def discounted_subtotal(cart) -> Decimal:
    remaining = subtotal(cart) - order_discount_amount(cart)
    return remaining if remaining > ZERO else ZERO


def tax(cart, tax_rate) -> Decimal:
    return money(discounted_subtotal(cart) * Decimal(str(tax_rate)))


def total(cart, tax_rate) -> Decimal:
    return discounted_subtotal(cart) + tax(cart, tax_rate)


def change_due(*, total_amount, amount_tendered) -> Decimal:
    """Exact difference; negative means the tender does not cover the total."""
    return money(amount_tendered) - money(total_amount)


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    discount: Decimal
    discounted_subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    item_count: int


def compute_totals(cart, tax_rate) -> CartTotals:
    rate = Decimal(str(tax_rate))
    return CartTotals(
        subtotal=subtotal(cart),
        discount=order_discount_amount(cart),
        discounted_subtotal=discounted_subtotal(cart),
        tax_rate=rate,
        tax=tax(cart, rate),
        total=total(cart, rate),
        item_count=cart.item_count,
    )
