# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem


# ======================================================
# SALE ITEM INLINE (READ-ONLY)
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "sku",
        "quantity",
        "unit_price",
        "total_price",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


# ======================================================
# SALE ADMIN
# ======================================================


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_number",
        "status",
        "payment_method",
        "total_amount",
        "created_at",
    )
    readonly_fields = (
        "transaction_number",
        "customer_id",
        "subtotal_amount",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_method",
        "amount_tendered",
        "change_due",
        "status",
        "created_at",
        "completed_at",
        "voided_at",
        "void_reason",
        "returned_at",
        "return_reason",
    )
    search_fields = ("transaction_number", "customer_id")
    list_filter = ("status", "payment_method", "created_at")
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False
