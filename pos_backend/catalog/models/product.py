# catalog/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from catalog.records import ProductRecord


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL:
    - quantity_on_hand is the single stock counter read by the register.
    - The register never writes it; the sale backend decrements it on sale
      and restores it on void/return.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    quantity_on_hand = models.PositiveIntegerField(default=0)

    attributes = models.JSONField(default=dict, blank=True)

    category = models.CharField(max_length=128, blank=True, default="", db_index=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError({"unit_price": "Unit price cannot be negative"})

        if not isinstance(self.attributes, dict):
            raise ValidationError({"attributes": "attributes must be a key/value object"})

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=str(self.id),
            name=self.name,
            sku=self.sku,
            unit_price=Decimal(self.unit_price),
            quantity_on_hand=int(self.quantity_on_hand or 0),
            attributes=dict(self.attributes or {}),
            category=self.category or None,
        )
