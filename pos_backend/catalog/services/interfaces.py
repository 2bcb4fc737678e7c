# catalog/services/interfaces.py

"""
COLLABORATOR INTERFACES

The register engine depends only on these protocols. The ORM-backed
providers in catalog.services.providers are the reference implementation;
tests and remote deployments can supply any object with the same shape.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Protocol

from catalog.records import CouponEvaluation, CustomerRecord, ProductRecord, TaxRuleRecord


class ProductCatalog(Protocol):
    def list_products(self) -> List[ProductRecord]: ...

    def get_product(self, product_id: str) -> Optional[ProductRecord]: ...


class CustomerDirectory(Protocol):
    def search(self, query: str) -> List[CustomerRecord]: ...

    def get_customer(self, customer_id: str) -> Optional[CustomerRecord]: ...


class CouponValidator(Protocol):
    def evaluate(self, code: str, subtotal: Decimal) -> CouponEvaluation: ...


class TaxRuleProvider(Protocol):
    def list_tax_rules(self) -> List[TaxRuleRecord]: ...
