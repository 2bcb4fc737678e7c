# sales/records.py

"""
SALE RECORDS

Values exchanged between the register and the sale backend.

- CreateSaleRequest: the frozen snapshot submitted at checkout.
- SaleRecord: the backend's authoritative answer (immutable).
- PendingSale / ConfirmedSale: explicit submission states; a sale is never
  considered done until the backend confirmed it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_OTHER = "other"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD, PAYMENT_OTHER)


@dataclass(frozen=True)
class SaleRequestItem:
    product_id: str
    quantity: int
    unit_price: Decimal
    name: str = ""
    sku: str = ""


@dataclass(frozen=True)
class CreateSaleRequest:
    items: Tuple[SaleRequestItem, ...]
    payment_method: str
    customer_id: Optional[str] = None
    discount_amount: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    amount_tendered: Optional[Decimal] = None
    notes: str = ""

    def to_payload(self) -> dict:
        payload = {
            "items": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                }
                for item in self.items
            ],
            "payment_method": self.payment_method,
        }
        if self.customer_id:
            payload["customer_id"] = self.customer_id
        if self.discount_amount:
            payload["discount_amount"] = str(self.discount_amount)
        if self.tax_amount:
            payload["tax_amount"] = str(self.tax_amount)
        if self.amount_tendered is not None:
            payload["amount_tendered"] = str(self.amount_tendered)
        if self.notes:
            payload["notes"] = self.notes
        return payload


@dataclass(frozen=True)
class SaleLine:
    product_id: Optional[str]
    name: str
    sku: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class SaleRecord:
    id: str
    transaction_number: str
    items: Tuple[SaleLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    status: str
    created_at: datetime
    customer_id: Optional[str] = None
    amount_tendered: Optional[Decimal] = None
    change_due: Optional[Decimal] = None
    completed_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    void_reason: str = ""
    returned_at: Optional[datetime] = None
    return_reason: str = ""


@dataclass(frozen=True)
class SalePage:
    items: Tuple[SaleRecord, ...]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size if self.page_size > 0 else 0


@dataclass(frozen=True)
class PendingSale:
    request: CreateSaleRequest
    total: Decimal
    submitted_at: datetime


@dataclass(frozen=True)
class ConfirmedSale:
    sale: SaleRecord
    request: CreateSaleRequest
