# pos/serializers/cart.py

"""
CART SERIALIZERS

Purpose:
- Return a register's live cart in a frontend-friendly shape.
- Totals are computed server-side on every read (never trusted from client).
"""

from rest_framework import serializers

from .cart_item import CartLineItemSerializer


class CustomerSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.CharField(read_only=True)
    phone = serializers.CharField(read_only=True)


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    quantity_on_hand = serializers.IntegerField(read_only=True)
    attributes = serializers.DictField(read_only=True)
    category = serializers.CharField(read_only=True, allow_null=True)


class CartSerializer(serializers.Serializer):
    """
    Guarantees:
    - lines are read-only
    - discount is the single order-level discount (manual or coupon) or null
    """

    lines = CartLineItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    line_count = serializers.IntegerField(read_only=True)
    customer = CustomerSerializer(read_only=True, allow_null=True)
    discount = serializers.SerializerMethodField()
    coupon_code = serializers.CharField(read_only=True, allow_null=True)
    notes = serializers.CharField(read_only=True)
    hold_id = serializers.CharField(read_only=True, allow_null=True)

    def get_discount(self, obj):
        return obj.discount.to_dict() if obj.discount else None


class CartTotalsSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    discounted_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    tax_rate = serializers.DecimalField(max_digits=8, decimal_places=5, read_only=True)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    item_count = serializers.IntegerField(read_only=True)


class HeldTransactionSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    note = serializers.CharField(read_only=True)
    held_at = serializers.DateTimeField(read_only=True)
    cart = CartSerializer(read_only=True)
