# pos/views/api.py

"""
REGISTER API VIEWS

Purpose:
- Register-scoped live cart (one per register id)
- Add/update/remove/override lines, customer, discount, coupon, notes
- Hold / resume / delete suspended carts
- Checkout steps (method selection, cash tender, confirm, cancel, retry)

Hard rules:
- Money is server-owned: prices come from the catalog, totals are derived.
- Every mutation answers with the full register state (cart + totals + checkout).
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from pos.domain import UNSET
from pos.serializers import (
    CartSerializer,
    CartTotalsSerializer,
    CustomerSerializer,
    HeldTransactionSerializer,
    ProductSerializer,
)
from pos.serializers.inputs import (
    AddCartItemInputSerializer,
    CouponInputSerializer,
    HoldInputSerializer,
    LineOverrideInputSerializer,
    NotesInputSerializer,
    OrderDiscountInputSerializer,
    PaymentMethodInputSerializer,
    SetCustomerInputSerializer,
    TenderInputSerializer,
    UpdateQuantityInputSerializer,
)
from pos.services.registry import get_register_session
from pos.views.errors import HANDLED_ERRORS, register_error_response
from sales.records import ConfirmedSale
from sales.serializers import SaleRecordSerializer


# =====================================================
# HELPERS
# =====================================================

def register_state(session) -> dict:
    return {
        "register_id": session.register_id,
        "cart": CartSerializer(session.cart).data,
        "totals": CartTotalsSerializer(session.totals()).data,
        "checkout": session.checkout.to_dict(),
    }


class RegisterAPIView(APIView):
    """
    Base view: resolves the register session from the URL and turns engine
    errors into the canonical error response.
    """

    permission_classes = [IsAuthenticated]

    def get_session(self):
        return get_register_session(self.kwargs["register_id"])

    def handle_exception(self, exc):
        if isinstance(exc, HANDLED_ERRORS):
            return register_error_response(exc)
        return super().handle_exception(exc)

    def state_response(self, session, http_status=status.HTTP_200_OK, **extra):
        payload = register_state(session)
        payload.update(extra)
        return Response(payload, status=http_status)


# =====================================================
# REGISTER + CATALOG
# =====================================================

class RegisterStateView(RegisterAPIView):
    @extend_schema(
        responses={200: dict},
        description="Live cart, derived totals and checkout state of a register",
    )
    def get(self, request, register_id):
        return self.state_response(self.get_session())


class ProductListView(RegisterAPIView):
    @extend_schema(responses={200: ProductSerializer(many=True)}, description="Catalog products")
    def get(self, request, register_id):
        products = self.get_session().list_products()
        return Response(ProductSerializer(products, many=True).data)


class CustomerSearchView(RegisterAPIView):
    @extend_schema(
        parameters=[OpenApiParameter("q", str, description="name / email / phone substring")],
        responses={200: CustomerSerializer(many=True)},
        description="Search the customer directory",
    )
    def get(self, request, register_id):
        customers = self.get_session().search_customers(request.query_params.get("q", ""))
        return Response(CustomerSerializer(customers, many=True).data)


# =====================================================
# CART
# =====================================================

class CartView(RegisterAPIView):
    @extend_schema(responses={200: dict}, description="Clear the live cart")
    def delete(self, request, register_id):
        session = self.get_session()
        session.clear_cart()
        return self.state_response(session)


class CartItemsView(RegisterAPIView):
    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: dict},
        description="Add a product (increments its line if present; stock guarded)",
    )
    def post(self, request, register_id):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.add_item(
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
        )
        return self.state_response(session)


class CartItemDetailView(RegisterAPIView):
    @extend_schema(
        request=LineOverrideInputSerializer,
        responses={200: dict},
        description="Set price override / item discount / discount reason on a line",
    )
    def patch(self, request, register_id, product_id):
        serializer = LineOverrideInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        session = self.get_session()
        session.set_line_override(
            product_id,
            price_override=data.get("price_override", UNSET),
            item_discount=data.get("item_discount", UNSET),
            discount_reason=data.get("discount_reason", UNSET),
        )
        return self.state_response(session)

    @extend_schema(responses={200: dict}, description="Remove a line")
    def delete(self, request, register_id, product_id):
        session = self.get_session()
        session.remove_item(product_id)
        return self.state_response(session)


class CartItemQuantityView(RegisterAPIView):
    @extend_schema(
        request=UpdateQuantityInputSerializer,
        responses={200: dict},
        description="Shift a line's quantity by delta (<= 0 removes the line)",
    )
    def post(self, request, register_id, product_id):
        serializer = UpdateQuantityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.update_quantity(product_id, serializer.validated_data["delta"])
        return self.state_response(session)


class CartCustomerView(RegisterAPIView):
    @extend_schema(request=SetCustomerInputSerializer, responses={200: dict}, description="Attach or detach a customer")
    def put(self, request, register_id):
        serializer = SetCustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.set_customer(serializer.validated_data.get("customer_id") or None)
        return self.state_response(session)


class CartDiscountView(RegisterAPIView):
    @extend_schema(
        request=OrderDiscountInputSerializer,
        responses={200: dict},
        description="Set a manual order discount (replaces any coupon)",
    )
    def put(self, request, register_id):
        serializer = OrderDiscountInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.set_order_discount(
            serializer.validated_data["kind"],
            serializer.validated_data["value"],
        )
        return self.state_response(session)

    @extend_schema(responses={200: dict}, description="Remove the manual order discount")
    def delete(self, request, register_id):
        session = self.get_session()
        session.set_order_discount(None)
        return self.state_response(session)


class CartCouponView(RegisterAPIView):
    @extend_schema(
        request=CouponInputSerializer,
        responses={200: dict},
        description="Validate and apply a coupon (replaces any manual discount)",
    )
    def post(self, request, register_id):
        serializer = CouponInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.apply_coupon(serializer.validated_data["code"])
        return self.state_response(session)

    @extend_schema(responses={200: dict}, description="Remove the coupon")
    def delete(self, request, register_id):
        session = self.get_session()
        session.clear_coupon()
        return self.state_response(session)


class CartNotesView(RegisterAPIView):
    @extend_schema(request=NotesInputSerializer, responses={200: dict}, description="Replace the cart notes")
    def put(self, request, register_id):
        serializer = NotesInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.set_notes(serializer.validated_data["notes"])
        return self.state_response(session)


# =====================================================
# HOLDS
# =====================================================

class HoldListView(RegisterAPIView):
    @extend_schema(responses={200: HeldTransactionSerializer(many=True)}, description="Held carts, oldest first")
    def get(self, request, register_id):
        holds = self.get_session().list_holds()
        return Response(HeldTransactionSerializer(holds, many=True).data)

    @extend_schema(
        request=HoldInputSerializer,
        responses={201: dict},
        description="Hold the live cart (an empty cart is not held)",
    )
    def post(self, request, register_id):
        serializer = HoldInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        entry = session.hold(serializer.validated_data["note"])
        if entry is None:
            return self.state_response(session, held=None)

        return self.state_response(
            session,
            http_status=status.HTTP_201_CREATED,
            held=HeldTransactionSerializer(entry).data,
        )


class HoldDetailView(RegisterAPIView):
    @extend_schema(responses={204: None}, description="Delete a held cart without restoring it")
    def delete(self, request, register_id, hold_id):
        self.get_session().delete_hold(hold_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class HoldResumeView(RegisterAPIView):
    @extend_schema(
        responses={200: dict},
        description="Resume a held cart (a non-empty live cart is auto-held first)",
    )
    def post(self, request, register_id, hold_id):
        session = self.get_session()
        auto_held = session.resume(hold_id)
        return self.state_response(
            session,
            auto_held=HeldTransactionSerializer(auto_held).data if auto_held else None,
        )


# =====================================================
# CHECKOUT
# =====================================================

def _sale_payload(result):
    if isinstance(result, ConfirmedSale):
        return SaleRecordSerializer(result.sale).data
    return None


class CheckoutView(RegisterAPIView):
    @extend_schema(responses={200: dict}, description="Checkout state of the register")
    def get(self, request, register_id):
        return Response(self.get_session().checkout.to_dict())


class CheckoutBeginView(RegisterAPIView):
    @extend_schema(request=None, responses={200: dict}, description="Start checkout (method selection)")
    def post(self, request, register_id):
        session = self.get_session()
        session.begin_checkout()
        return self.state_response(session)


class CheckoutMethodView(RegisterAPIView):
    @extend_schema(
        request=PaymentMethodInputSerializer,
        responses={200: dict},
        description="Select payment method: cash moves to tender entry, card/other finalize the sale",
    )
    def post(self, request, register_id):
        serializer = PaymentMethodInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        result = session.select_payment_method(serializer.validated_data["payment_method"])
        return self.state_response(session, sale=_sale_payload(result))


class CheckoutTenderView(RegisterAPIView):
    @extend_schema(
        request=TenderInputSerializer,
        responses={200: dict},
        description="Record cash tendered and preview change due",
    )
    def post(self, request, register_id):
        serializer = TenderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = self.get_session()
        session.tender(serializer.validated_data["amount"])
        return self.state_response(session)


class CheckoutConfirmView(RegisterAPIView):
    @extend_schema(request=None, responses={200: dict}, description="Confirm the cash tender and finalize the sale")
    def post(self, request, register_id):
        session = self.get_session()
        result = session.confirm_tender()
        return self.state_response(session, sale=_sale_payload(result))


class CheckoutCancelView(RegisterAPIView):
    @extend_schema(request=None, responses={200: dict}, description="Cancel checkout back to cart building")
    def post(self, request, register_id):
        session = self.get_session()
        session.cancel_checkout()
        return self.state_response(session)


class CheckoutRetryView(RegisterAPIView):
    @extend_schema(request=None, responses={200: dict}, description="Retry a failed checkout from method selection")
    def post(self, request, register_id):
        session = self.get_session()
        session.retry_checkout()
        return self.state_response(session)


class CheckoutResetView(RegisterAPIView):
    @extend_schema(request=None, responses={200: dict}, description="Start the next sale after completion")
    def post(self, request, register_id):
        session = self.get_session()
        session.reset_checkout()
        return self.state_response(session)
