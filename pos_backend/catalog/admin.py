# catalog/admin.py

from django.contrib import admin

from catalog.models import Coupon, Customer, Product, TaxRule


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "unit_price", "quantity_on_hand", "category", "is_active")
    search_fields = ("name", "sku")
    list_filter = ("is_active", "category")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "is_active")
    search_fields = ("name", "email", "phone")
    list_filter = ("is_active",)


@admin.register(TaxRule)
class TaxRuleAdmin(admin.ModelAdmin):
    list_display = ("name", "rate", "priority", "region", "category", "is_active")
    list_filter = ("is_active", "region")
    ordering = ("-priority", "name")


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "value", "min_subtotal", "valid_until", "is_active")
    search_fields = ("code",)
    list_filter = ("discount_type", "is_active")
