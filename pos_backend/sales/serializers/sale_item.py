# sales/serializers/sale_item.py

from rest_framework import serializers


class SaleLineSerializer(serializers.Serializer):
    """
    Sale line (read-only snapshot).
    Designed for receipts + UI display.
    """

    product_id = serializers.CharField(read_only=True, allow_null=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
