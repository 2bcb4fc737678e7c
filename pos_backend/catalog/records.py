# catalog/records.py

"""
CATALOG RECORDS

Plain, immutable values handed to the register engine.

Rules:
- The engine never holds ORM instances; providers convert rows into records.
- Money is always Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    sku: str
    unit_price: Decimal
    quantity_on_hand: int
    attributes: dict = field(default_factory=dict)
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "unit_price": str(self.unit_price),
            "quantity_on_hand": self.quantity_on_hand,
            "attributes": dict(self.attributes),
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProductRecord":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            sku=data.get("sku", ""),
            unit_price=Decimal(str(data.get("unit_price", "0.00"))),
            quantity_on_hand=int(data.get("quantity_on_hand", 0)),
            attributes=dict(data.get("attributes") or {}),
            category=data.get("category"),
        )


@dataclass(frozen=True)
class CustomerRecord:
    id: str
    name: str
    email: str = ""
    phone: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}

    @classmethod
    def from_dict(cls, data: dict) -> "CustomerRecord":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email") or "",
            phone=data.get("phone") or "",
        )


@dataclass(frozen=True)
class TaxRuleRecord:
    """
    A tax rate with its applicability scope.

    rate is a percentage (13.00 means 13%). Empty region/category means
    the rule applies everywhere / to every category.
    """

    id: str
    name: str
    rate: Decimal
    priority: int = 0
    region: str = ""
    category: str = ""

    def applies_to(self, *, region: str = "", categories: Iterable[str] = ()) -> bool:
        if self.region and self.region != (region or ""):
            return False
        if self.category and self.category not in set(categories):
            return False
        return True


@dataclass(frozen=True)
class CouponEvaluation:
    valid: bool
    discount: Decimal = Decimal("0.00")
    discount_type: str = "fixed"
    message: str = ""
