# sales/services/sale_manager.py

"""
SALE LIFECYCLE MANAGER

Purpose:
- Turn a cart into a create-sale request and submit it to the sale backend.
- Void or return a completed sale.

Rules:
- The request is a frozen snapshot built at submission time; later cart
  mutations never reach it.
- Nothing is reported as done until the backend confirmed it:
  prepare() gives a PendingSale, submit() gives a ConfirmedSale.
- Void/return reasons are stripped; an empty or whitespace-only reason is
  rejected before any request is issued.
- Backend failures surface as RequestFailedError; no retry happens here.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.utils import timezone

from pos.services import pricing
from pos.services.exceptions import (
    EmptyCartError,
    RegisterValidationError,
    RequestFailedError,
)
from sales.records import (
    PAYMENT_CASH,
    PAYMENT_METHODS,
    ConfirmedSale,
    CreateSaleRequest,
    PendingSale,
    SalePage,
    SaleRecord,
    SaleRequestItem,
)
from sales.services.backend import SaleNotFoundError
from sales.services.sale_lifecycle import (
    STATUS_COMPLETED,
    STATUS_RETURNED,
    STATUS_VOIDED,
    InvalidSaleTransitionError,
    validate_transition,
)

logger = logging.getLogger(__name__)


def clean_reason(reason) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise RegisterValidationError("A reason is required")
    return cleaned


def build_sale_request(cart, payment_method: str, *, tax_rate, amount_tendered=None) -> CreateSaleRequest:
    if cart.is_empty:
        raise EmptyCartError("Cannot create a sale from an empty cart")

    if payment_method not in PAYMENT_METHODS:
        raise RegisterValidationError(f"Unsupported payment method: {payment_method}")

    if amount_tendered is not None and payment_method != PAYMENT_CASH:
        raise RegisterValidationError("Amount tendered applies to cash payments only")

    items = tuple(
        SaleRequestItem(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.effective_unit_price,
            name=line.product.name,
            sku=line.product.sku,
        )
        for line in cart.lines
    )

    return CreateSaleRequest(
        items=items,
        payment_method=payment_method,
        customer_id=cart.customer.id if cart.customer else None,
        discount_amount=pricing.order_discount_amount(cart),
        tax_amount=pricing.tax(cart, tax_rate),
        amount_tendered=None if amount_tendered is None else pricing.money(amount_tendered),
        notes=cart.notes,
    )


class SaleLifecycleManager:
    def __init__(self, backend):
        self.backend = backend

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    def prepare(self, cart, payment_method: str, *, tax_rate, amount_tendered=None) -> PendingSale:
        request = build_sale_request(
            cart,
            payment_method,
            tax_rate=tax_rate,
            amount_tendered=amount_tendered,
        )
        return PendingSale(
            request=request,
            total=pricing.total(cart, tax_rate),
            submitted_at=timezone.now(),
        )

    def submit(self, pending: PendingSale) -> ConfirmedSale:
        sale = self._call("create_sale", pending.request)

        if sale is None or sale.status != STATUS_COMPLETED or not sale.transaction_number:
            logger.warning("Sale backend did not confirm sale", extra={"total": str(pending.total)})
            raise RequestFailedError("Sale backend did not confirm the sale")

        if sale.total != pending.total:
            logger.warning(
                "Sale backend total differs from register total",
                extra={
                    "transaction_number": sale.transaction_number,
                    "register_total": str(pending.total),
                    "backend_total": str(sale.total),
                },
            )

        logger.info(
            "Sale confirmed",
            extra={"sale_id": sale.id, "transaction_number": sale.transaction_number},
        )
        return ConfirmedSale(sale=sale, request=pending.request)

    def create_sale(self, cart, payment_method: str, *, tax_rate, amount_tendered=None) -> ConfirmedSale:
        pending = self.prepare(
            cart,
            payment_method,
            tax_rate=tax_rate,
            amount_tendered=amount_tendered,
        )
        return self.submit(pending)

    # --------------------------------------------------
    # REVERSALS
    # --------------------------------------------------

    def void_sale(self, sale_id, reason) -> SaleRecord:
        return self._reverse(sale_id, reason, target_status=STATUS_VOIDED)

    def process_return(self, sale_id, reason) -> SaleRecord:
        return self._reverse(sale_id, reason, target_status=STATUS_RETURNED)

    def _reverse(self, sale_id, reason, *, target_status: str) -> SaleRecord:
        """
        FLOW:
        1) Validate the reason (no request issued on failure)
        2) Fetch the sale and validate the lifecycle transition
        3) Submit and require the backend to confirm the new status
        """
        reason = clean_reason(reason)

        sale = self._call("get_sale", sale_id)
        try:
            reversal = validate_transition(sale=sale, target_status=target_status)
        except InvalidSaleTransitionError as exc:
            raise RegisterValidationError(str(exc)) from exc

        updated = self._call(reversal.backend_method, sale_id, reason)

        if updated is None or updated.status != target_status:
            logger.warning(
                "Sale backend did not confirm reversal",
                extra={"sale_id": str(sale_id), "target_status": target_status},
            )
            raise RequestFailedError(f"Sale backend did not confirm the {target_status} status")

        logger.info(
            "Sale reversal confirmed",
            extra={"sale_id": updated.id, "status": updated.status},
        )
        return updated

    # --------------------------------------------------
    # READ
    # --------------------------------------------------

    def get_sale(self, sale_id) -> SaleRecord:
        return self._call("get_sale", sale_id)

    def list_sales(self, *, page: int = 1, page_size: int = 20, status: Optional[str] = None) -> SalePage:
        return self._call("list_sales", page=page, page_size=page_size, status=status)

    def _call(self, method: str, *args, **kwargs):
        try:
            return getattr(self.backend, method)(*args, **kwargs)
        except SaleNotFoundError:
            raise
        except Exception as exc:
            logger.warning(
                "Sale backend request failed",
                extra={"method": method, "error": str(exc)},
            )
            raise RequestFailedError(str(exc) or f"{method} failed") from exc
