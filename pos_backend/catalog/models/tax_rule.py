# catalog/models/tax_rule.py

"""
TAX RULE MODEL

Rules:
- rate is a percentage (13.00 == 13%).
- region / category are optional scopes; blank means "any".
- When several rules match a cart, the highest priority wins.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from catalog.records import TaxRuleRecord


class TaxRule(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=128)

    rate = models.DecimalField(
        max_digits=6,
        decimal_places=3,
        help_text="Percentage, e.g. 13.000 for 13%",
    )

    priority = models.IntegerField(default=0)

    region = models.CharField(max_length=64, blank=True, default="")
    category = models.CharField(max_length=128, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-priority", "created_at"]

    def __str__(self):
        return f"{self.name} ({self.rate}%)"

    def clean(self):
        if self.rate is None or Decimal(self.rate) < 0:
            raise ValidationError({"rate": "rate cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def to_record(self) -> TaxRuleRecord:
        return TaxRuleRecord(
            id=str(self.id),
            name=self.name,
            rate=Decimal(self.rate),
            priority=int(self.priority or 0),
            region=self.region or "",
            category=self.category or "",
        )
