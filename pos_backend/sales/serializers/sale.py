# sales/serializers/sale.py

from rest_framework import serializers

from sales.records import PAYMENT_METHODS
from sales.services.sale_lifecycle import SALE_STATUSES

from .sale_item import SaleLineSerializer


class SaleRecordSerializer(serializers.Serializer):
    """
    Sale serializer (read-only).
    Sales are immutable; only void/return change them, through their own endpoints.
    """

    id = serializers.CharField(read_only=True)
    transaction_number = serializers.CharField(read_only=True)
    status = serializers.ChoiceField(choices=SALE_STATUSES, read_only=True)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS, read_only=True)
    customer_id = serializers.CharField(read_only=True, allow_null=True)

    items = SaleLineSerializer(many=True, read_only=True)

    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    amount_tendered = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True, allow_null=True)
    change_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True, allow_null=True)

    created_at = serializers.DateTimeField(read_only=True)
    completed_at = serializers.DateTimeField(read_only=True, allow_null=True)
    voided_at = serializers.DateTimeField(read_only=True, allow_null=True)
    void_reason = serializers.CharField(read_only=True)
    returned_at = serializers.DateTimeField(read_only=True, allow_null=True)
    return_reason = serializers.CharField(read_only=True)


class SaleListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    page_size = serializers.IntegerField(min_value=1, max_value=200, required=False, default=20)
    status = serializers.ChoiceField(choices=SALE_STATUSES, required=False)


class SaleReasonInputSerializer(serializers.Serializer):
    """
    Void / return command. Blank reasons are passed through so the lifecycle
    manager rejects them with its own validation error.
    """

    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)
