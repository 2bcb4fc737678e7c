# catalog/services/providers.py

"""
ORM-BACKED COLLABORATORS

Reference implementations of the catalog protocols on top of the catalog
models. Every method returns records, never model instances.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db.models import Q

from catalog.models import Coupon, Customer, Product, TaxRule
from catalog.records import CouponEvaluation


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


class DatabaseProductCatalog:
    def list_products(self):
        return [p.to_record() for p in Product.objects.filter(is_active=True)]

    def get_product(self, product_id):
        if not _is_uuid(product_id):
            return None
        product = Product.objects.filter(id=product_id, is_active=True).first()
        return product.to_record() if product else None


class DatabaseCustomerDirectory:
    def search(self, query: str):
        q = (query or "").strip()
        qs = Customer.objects.filter(is_active=True)
        if q:
            qs = qs.filter(
                Q(name__icontains=q) | Q(email__icontains=q) | Q(phone__icontains=q)
            )
        return [c.to_record() for c in qs[:50]]

    def get_customer(self, customer_id):
        if not _is_uuid(customer_id):
            return None
        customer = Customer.objects.filter(id=customer_id, is_active=True).first()
        return customer.to_record() if customer else None


class DatabaseCouponValidator:
    def evaluate(self, code: str, subtotal: Decimal) -> CouponEvaluation:
        normalized = (code or "").strip().upper()
        if not normalized:
            return CouponEvaluation(valid=False, message="Coupon code is required")

        coupon = Coupon.objects.filter(code=normalized).first()
        if coupon is None:
            return CouponEvaluation(valid=False, message=f"Unknown coupon code '{normalized}'")

        return coupon.evaluate(Decimal(subtotal))


class DatabaseTaxRuleProvider:
    def list_tax_rules(self):
        return [r.to_record() for r in TaxRule.objects.filter(is_active=True)]
