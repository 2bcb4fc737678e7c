"""
PATH: pos/serializers/cart_item.py

CART LINE SERIALIZER

Purpose:
- Serialize cart lines for the register UI.
- Prices are server-derived (effective unit price, line total).
"""

from rest_framework import serializers


class CartLineItemSerializer(serializers.Serializer):
    product_id = serializers.CharField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    category = serializers.CharField(source="product.category", read_only=True, allow_null=True)
    quantity_on_hand = serializers.IntegerField(source="product.quantity_on_hand", read_only=True)

    quantity = serializers.IntegerField(read_only=True)

    unit_price = serializers.DecimalField(
        source="product.unit_price",
        max_digits=10,
        decimal_places=2,
        read_only=True,
    )
    price_override = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        read_only=True,
        allow_null=True,
    )
    item_discount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    discount_reason = serializers.CharField(read_only=True)

    effective_unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
