# catalog/models/coupon.py

"""
COUPON MODEL

A promotion code resolved into an order-level discount.

Rules:
- Codes are stored upper-case and matched case-insensitively.
- PERCENTAGE value is 0..100; FIXED value is a currency amount.
- A coupon is only valid inside its validity window and above min_subtotal.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from catalog.records import CouponEvaluation


class Coupon(models.Model):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=64, unique=True)

    discount_type = models.CharField(
        max_length=16,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )

    value = models.DecimalField(max_digits=10, decimal_places=2)

    min_subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    valid_from = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return self.code

    def clean(self):
        if self.value is None or Decimal(self.value) < 0:
            raise ValidationError({"value": "value cannot be negative"})

        if self.discount_type == self.DiscountType.PERCENTAGE and Decimal(self.value) > 100:
            raise ValidationError({"value": "percentage cannot exceed 100"})

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        self.full_clean()
        return super().save(*args, **kwargs)

    def evaluate(self, subtotal: Decimal, *, now=None) -> CouponEvaluation:
        now = now or timezone.now()

        if not self.is_active:
            return CouponEvaluation(valid=False, message="Coupon is inactive")
        if self.valid_from and now < self.valid_from:
            return CouponEvaluation(valid=False, message="Coupon is not active yet")
        if self.valid_until and now > self.valid_until:
            return CouponEvaluation(valid=False, message="Coupon has expired")
        if Decimal(subtotal) < Decimal(self.min_subtotal):
            return CouponEvaluation(
                valid=False,
                message=f"Coupon requires a subtotal of at least {self.min_subtotal}",
            )

        return CouponEvaluation(
            valid=True,
            discount=Decimal(self.value),
            discount_type=self.discount_type,
        )
