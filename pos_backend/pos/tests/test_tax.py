# pos/tests/test_tax.py

from decimal import Decimal

from django.test import SimpleTestCase

from catalog.records import TaxRuleRecord
from pos.domain import Cart, CartLineItem
from pos.services.tax import resolve_tax_rate, resolve_tax_rule
from pos.tests.factories import make_product


class TaxResolutionTests(SimpleTestCase):
    def setUp(self):
        self.cart = Cart(lines=[CartLineItem(product=make_product(category="food"), quantity=1)])

    def test_no_rules_means_zero_rate(self):
        self.assertEqual(resolve_tax_rate([], self.cart), Decimal("0"))

    def test_highest_priority_matching_rule_wins(self):
        rules = [
            TaxRuleRecord(id="a", name="General", rate=Decimal("13"), priority=1),
            TaxRuleRecord(id="b", name="Food", rate=Decimal("5"), priority=10, category="food"),
            TaxRuleRecord(id="c", name="Luxury", rate=Decimal("25"), priority=99, category="jewelry"),
        ]

        self.assertEqual(resolve_tax_rule(rules, categories=self.cart.categories).id, "b")
        self.assertEqual(resolve_tax_rate(rules, self.cart), Decimal("0.05"))

    def test_region_scope(self):
        rules = [
            TaxRuleRecord(id="on", name="Ontario", rate=Decimal("13"), priority=5, region="ON"),
            TaxRuleRecord(id="any", name="Fallback", rate=Decimal("5"), priority=0),
        ]

        self.assertEqual(resolve_tax_rate(rules, self.cart, region="ON"), Decimal("0.13"))
        self.assertEqual(resolve_tax_rate(rules, self.cart, region="QC"), Decimal("0.05"))

    def test_ties_keep_provider_order(self):
        rules = [
            TaxRuleRecord(id="first", name="A", rate=Decimal("7"), priority=3),
            TaxRuleRecord(id="second", name="B", rate=Decimal("8"), priority=3),
        ]
        self.assertEqual(resolve_tax_rule(rules).id, "first")
