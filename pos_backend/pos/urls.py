"""
PATH: pos/urls.py

REGISTER URLS

Purpose:
- Register state, catalog and customer lookups
- Cart line operations and order-level adjustments
- Holds
- Checkout steps
"""

from django.urls import include, path

from pos.views.api import (
    CartCouponView,
    CartCustomerView,
    CartDiscountView,
    CartItemDetailView,
    CartItemQuantityView,
    CartItemsView,
    CartNotesView,
    CartView,
    CheckoutBeginView,
    CheckoutCancelView,
    CheckoutConfirmView,
    CheckoutMethodView,
    CheckoutResetView,
    CheckoutRetryView,
    CheckoutTenderView,
    CheckoutView,
    CustomerSearchView,
    HoldDetailView,
    HoldListView,
    HoldResumeView,
    ProductListView,
    RegisterStateView,
)

app_name = "pos"

register_patterns = [
    path("", RegisterStateView.as_view(), name="register"),
    path("products/", ProductListView.as_view(), name="products"),
    path("customers/", CustomerSearchView.as_view(), name="customers"),

    path("cart/", CartView.as_view(), name="cart"),
    path("cart/items/", CartItemsView.as_view(), name="cart-items"),
    path("cart/items/<str:product_id>/", CartItemDetailView.as_view(), name="cart-item"),
    path("cart/items/<str:product_id>/quantity/", CartItemQuantityView.as_view(), name="cart-item-quantity"),
    path("cart/customer/", CartCustomerView.as_view(), name="cart-customer"),
    path("cart/discount/", CartDiscountView.as_view(), name="cart-discount"),
    path("cart/coupon/", CartCouponView.as_view(), name="cart-coupon"),
    path("cart/notes/", CartNotesView.as_view(), name="cart-notes"),

    path("holds/", HoldListView.as_view(), name="holds"),
    path("holds/<str:hold_id>/", HoldDetailView.as_view(), name="hold"),
    path("holds/<str:hold_id>/resume/", HoldResumeView.as_view(), name="hold-resume"),

    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("checkout/begin/", CheckoutBeginView.as_view(), name="checkout-begin"),
    path("checkout/method/", CheckoutMethodView.as_view(), name="checkout-method"),
    path("checkout/tender/", CheckoutTenderView.as_view(), name="checkout-tender"),
    path("checkout/confirm/", CheckoutConfirmView.as_view(), name="checkout-confirm"),
    path("checkout/cancel/", CheckoutCancelView.as_view(), name="checkout-cancel"),
    path("checkout/retry/", CheckoutRetryView.as_view(), name="checkout-retry"),
    path("checkout/reset/", CheckoutResetView.as_view(), name="checkout-reset"),

    path("quotes/", include("quotes.urls")),
]

urlpatterns = [
    path("registers/<str:register_id>/", include(register_patterns)),
]
