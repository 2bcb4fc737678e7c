# pos/serializers/inputs.py

"""
REGISTER INPUT SERIALIZERS

Request bodies for cart, hold and checkout endpoints (also used for the
OpenAPI schema).
"""

from rest_framework import serializers

from pos.domain import DISCOUNT_KINDS
from sales.records import PAYMENT_METHODS


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateQuantityInputSerializer(serializers.Serializer):
    delta = serializers.IntegerField()


class LineOverrideInputSerializer(serializers.Serializer):
    """Omitted fields are left as they are; null clears a field."""

    price_override = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    item_discount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    discount_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        discount = attrs.get("item_discount")
        reason = (attrs.get("discount_reason") or "").strip()
        if discount and not reason:
            raise serializers.ValidationError(
                {"discount_reason": "A reason is required for an item discount."}
            )
        return attrs


class SetCustomerInputSerializer(serializers.Serializer):
    customer_id = serializers.CharField(allow_null=True, allow_blank=True)


class OrderDiscountInputSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=DISCOUNT_KINDS)
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    def validate(self, attrs):
        if attrs["kind"] == "percentage" and attrs["value"] > 100:
            raise serializers.ValidationError({"value": "percentage cannot exceed 100"})
        return attrs


class CouponInputSerializer(serializers.Serializer):
    code = serializers.CharField()


class NotesInputSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class HoldInputSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentMethodInputSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS)


class TenderInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
