# quotes/serializers.py

"""
QUOTE SERIALIZERS

Status is derived at serialization time from the request clock.
"""

from django.utils import timezone
from rest_framework import serializers


class QuoteItemSerializer(serializers.Serializer):
    product_id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True, allow_null=True)
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class QuoteCustomerSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)


class QuoteSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    status = serializers.SerializerMethodField()
    items = QuoteItemSerializer(many=True, read_only=True)
    customer = QuoteCustomerSerializer(read_only=True, allow_null=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    notes = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    expires_at = serializers.DateTimeField(read_only=True)
    converted_at = serializers.DateTimeField(read_only=True, allow_null=True)

    def get_status(self, obj) -> str:
        now = self.context.get("now") or timezone.now()
        return obj.status_at(now)
