# pos/services/tax.py

"""
TAX RULE RESOLUTION

- A rule matches when its region scope and category scope fit the cart.
- Highest priority wins; ties keep provider order.
- No matching rule means a rate of 0.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from catalog.records import TaxRuleRecord

HUNDRED = Decimal("100")


def resolve_tax_rule(
    rules: Iterable[TaxRuleRecord],
    *,
    region: str = "",
    categories: Iterable[str] = (),
) -> Optional[TaxRuleRecord]:
    categories = list(categories)
    best = None
    for rule in rules:
        if not rule.applies_to(region=region, categories=categories):
            continue
        if best is None or rule.priority > best.priority:
            best = rule
    return best


def resolve_tax_rate(rules: Iterable[TaxRuleRecord], cart, *, region: str = "") -> Decimal:
    """Rate as a fraction (13% -> 0.13)."""
    rule = resolve_tax_rule(rules, region=region, categories=cart.categories)
    if rule is None:
        return Decimal("0")
    return Decimal(rule.rate) / HUNDRED
