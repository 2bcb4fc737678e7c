# quotes/domain.py

"""
QUOTE SNAPSHOTS

A quote is a priced, expirable copy of a prospective sale.

Rules:
- Items are denormalized (name/sku/price copied), never live product refs.
- Status is DERIVED on every read:
    converted                      -> converted (terminal)
    now > expires_at               -> expired
    otherwise                      -> pending
- The stored status is only trusted for "converted".
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from django.utils import timezone
from django.utils.dateparse import parse_datetime

STATUS_PENDING = "pending"
STATUS_CONVERTED = "converted"
STATUS_EXPIRED = "expired"

STATUS_CHOICES = (STATUS_PENDING, STATUS_CONVERTED, STATUS_EXPIRED)


def derive_quote_status(*, stored_status: str, expires_at: datetime, now: datetime) -> str:
    if stored_status == STATUS_CONVERTED:
        return STATUS_CONVERTED
    if now > expires_at:
        return STATUS_EXPIRED
    return STATUS_PENDING


@dataclass(frozen=True)
class QuoteItem:
    product_id: str
    name: str
    sku: str
    quantity: int
    unit_price: Decimal
    category: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuoteItem":
        return cls(
            product_id=str(data["product_id"]),
            name=data.get("name", ""),
            sku=data.get("sku", ""),
            quantity=int(data["quantity"]),
            unit_price=Decimal(data["unit_price"]),
            category=data.get("category"),
        )


@dataclass(frozen=True)
class QuoteCustomer:
    id: str
    name: str


@dataclass(frozen=True)
class Quote:
    id: str
    items: Tuple[QuoteItem, ...]
    customer: Optional[QuoteCustomer]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    expires_at: datetime
    stored_status: str = STATUS_PENDING
    notes: str = ""
    converted_at: Optional[datetime] = field(default=None, compare=False)

    def status_at(self, now: datetime) -> str:
        return derive_quote_status(
            stored_status=self.stored_status,
            expires_at=self.expires_at,
            now=now,
        )

    @property
    def status(self) -> str:
        return self.status_at(timezone.now())

    def mark_converted(self, *, now: datetime) -> "Quote":
        return replace(self, stored_status=STATUS_CONVERTED, converted_at=now)

    def matches(self, query: str) -> bool:
        q = (query or "").strip().lower()
        if not q:
            return True
        if q in self.id.lower():
            return True
        if self.customer and q in self.customer.name.lower():
            return True
        return any(q in item.name.lower() for item in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "items": [item.to_dict() for item in self.items],
            "customer": (
                {"id": self.customer.id, "name": self.customer.name} if self.customer else None
            ),
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "tax": str(self.tax),
            "total": str(self.total),
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "stored_status": self.stored_status,
            "notes": self.notes,
            "converted_at": self.converted_at.isoformat() if self.converted_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Quote":
        customer = data.get("customer")
        converted_at = data.get("converted_at")
        return cls(
            id=data["id"],
            items=tuple(QuoteItem.from_dict(i) for i in data.get("items") or []),
            customer=QuoteCustomer(id=str(customer["id"]), name=customer.get("name", "")) if customer else None,
            subtotal=Decimal(data["subtotal"]),
            discount=Decimal(data["discount"]),
            tax=Decimal(data["tax"]),
            total=Decimal(data["total"]),
            created_at=parse_datetime(data["created_at"]),
            expires_at=parse_datetime(data["expires_at"]),
            stored_status=data.get("stored_status") or STATUS_PENDING,
            notes=data.get("notes") or "",
            converted_at=parse_datetime(converted_at) if converted_at else None,
        )
