# sales/services/backend.py

"""
SALE BACKEND

Purpose:
- The authoritative side of the sale lifecycle: it assigns ids and
  transaction numbers, writes stock, and records voids and returns.
- The register talks to it only through the SaleBackend protocol.

DatabaseSaleBackend is the reference implementation over the Sale /
SaleItem / catalog.Product tables.

GUARANTEES:
- create_sale is atomic: the sale, its items and the stock decrements are
  written together or not at all.
- void_sale and return_sale restore stock for every line whose product
  still exists.
- A sale already voided or returned is never reversed twice.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import Product
from sales.models import Sale, SaleItem
from sales.records import PAYMENT_METHODS, CreateSaleRequest, SalePage, SaleRecord
from sales.services.sale_lifecycle import (
    SALE_STATUSES,
    STATUS_RETURNED,
    STATUS_VOIDED,
    InvalidSaleTransitionError,
    validate_transition,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

TRANSACTION_PREFIX = "TXN"


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class SaleBackendError(Exception):
    """The backend refused or could not complete the request."""


class SaleNotFoundError(SaleBackendError):
    pass


class BackendStockError(SaleBackendError):
    pass


class BackendTransitionError(SaleBackendError):
    pass


# ============================================================
# PROTOCOL
# ============================================================


class SaleBackend(Protocol):
    def create_sale(self, request: CreateSaleRequest) -> SaleRecord: ...

    def get_sale(self, sale_id: str) -> SaleRecord: ...

    def void_sale(self, sale_id: str, reason: str) -> SaleRecord: ...

    def return_sale(self, sale_id: str, reason: str) -> SaleRecord: ...

    def list_sales(
        self, *, page: int = 1, page_size: int = 20, status: Optional[str] = None
    ) -> SalePage: ...


# ============================================================
# TRANSACTION NUMBERS
# ============================================================


def next_transaction_number(*, now=None) -> str:
    """
    TXN-YYYYMMDD-NNNN, sequential per calendar day.
    Must be called inside the create_sale transaction.
    """
    now = now or timezone.now()
    prefix = f"{TRANSACTION_PREFIX}-{timezone.localtime(now).strftime('%Y%m%d')}-"

    last = (
        Sale.objects.select_for_update()
        .filter(transaction_number__startswith=prefix)
        .order_by("-transaction_number")
        .values_list("transaction_number", flat=True)
        .first()
    )

    sequence = 1
    if last:
        try:
            sequence = int(last.rsplit("-", 1)[-1]) + 1
        except ValueError:
            sequence = Sale.objects.filter(transaction_number__startswith=prefix).count() + 1

    return f"{prefix}{sequence:04d}"


# ============================================================
# DATABASE BACKEND
# ============================================================


class DatabaseSaleBackend:
    def _load(self, sale_id, *, for_update=False) -> Sale:
        qs = Sale.objects.all()
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.prefetch_related("items").get(pk=sale_id)
        except (Sale.DoesNotExist, ValidationError, ValueError, TypeError):
            raise SaleNotFoundError(f"Sale {sale_id} not found") from None

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    @transaction.atomic
    def create_sale(self, request: CreateSaleRequest) -> SaleRecord:
        """
        FLOW:
        1) Validate payload shape
        2) Lock + check stock for every product
        3) Create Sale + immutable SaleItems
        4) Decrement stock
        5) Derive totals and change due
        """

        # --------------------------------------------------
        # 1. PAYLOAD VALIDATION
        # --------------------------------------------------
        if not request.items:
            raise SaleBackendError("A sale needs at least one item")

        if request.payment_method not in PAYMENT_METHODS:
            raise SaleBackendError(f"Unsupported payment method: {request.payment_method}")

        # --------------------------------------------------
        # 2. STOCK VALIDATION (fast fail before writing)
        # --------------------------------------------------
        product_ids = [item.product_id for item in request.items]
        try:
            products = {
                str(p.id): p
                for p in Product.objects.select_for_update().filter(pk__in=product_ids)
            }
        except ValidationError as exc:
            raise SaleBackendError("Malformed product id in sale request") from exc

        for item in request.items:
            product = products.get(str(item.product_id))
            if product is None:
                raise SaleBackendError(f"Product {item.product_id} not found")
            if item.quantity < 1:
                raise SaleBackendError(f"Invalid quantity for {product.name}")
            if product.quantity_on_hand < item.quantity:
                raise BackendStockError(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {product.quantity_on_hand}, Requested: {item.quantity}"
                )

        # --------------------------------------------------
        # 3. SALE + ITEMS
        # --------------------------------------------------
        now = timezone.now()
        subtotal = sum(
            (_money(item.unit_price) * item.quantity for item in request.items),
            Decimal("0.00"),
        )
        subtotal = _money(subtotal)
        discount = min(_money(request.discount_amount), subtotal)
        tax = _money(request.tax_amount)
        total = _money(subtotal - discount + tax)

        change = None
        tendered = None
        if request.amount_tendered is not None:
            tendered = _money(request.amount_tendered)
            if tendered < total:
                raise SaleBackendError(
                    f"Amount tendered {tendered} does not cover total {total}"
                )
            change = _money(tendered - total)

        try:
            sale = Sale.objects.create(
                transaction_number=next_transaction_number(now=now),
                customer_id=request.customer_id or "",
                subtotal_amount=subtotal,
                discount_amount=discount,
                tax_amount=tax,
                total_amount=total,
                payment_method=request.payment_method,
                amount_tendered=tendered,
                change_due=change,
                notes=request.notes or "",
                status=Sale.STATUS_COMPLETED,
                created_at=now,
                completed_at=now,
            )
        except IntegrityError as exc:
            raise SaleBackendError("Could not allocate a transaction number") from exc

        for item in request.items:
            product = products[str(item.product_id)]
            SaleItem.objects.create(
                sale=sale,
                product=product,
                product_name=item.name or product.name,
                sku=item.sku or product.sku,
                quantity=item.quantity,
                unit_price=_money(item.unit_price),
            )

            # --------------------------------------------------
            # 4. STOCK DECREMENT
            # --------------------------------------------------
            Product.objects.filter(pk=product.pk).update(
                quantity_on_hand=F("quantity_on_hand") - item.quantity
            )

        logger.info(
            "Sale created",
            extra={
                "sale_id": str(sale.id),
                "transaction_number": sale.transaction_number,
                "total": str(total),
                "payment_method": sale.payment_method,
            },
        )
        return sale.to_record()

    # --------------------------------------------------
    # READ
    # --------------------------------------------------

    def get_sale(self, sale_id) -> SaleRecord:
        return self._load(sale_id).to_record()

    def list_sales(self, *, page: int = 1, page_size: int = 20, status: Optional[str] = None) -> SalePage:
        page = max(int(page), 1)
        page_size = max(int(page_size), 1)

        qs = Sale.objects.all()
        if status:
            if status not in SALE_STATUSES:
                raise SaleBackendError(f"Unknown sale status: {status}")
            qs = qs.filter(status=status)

        total = qs.count()
        start = (page - 1) * page_size
        rows = qs.order_by("-created_at", "-transaction_number").prefetch_related("items")[
            start : start + page_size
        ]

        return SalePage(
            items=tuple(sale.to_record() for sale in rows),
            total=total,
            page=page,
            page_size=page_size,
        )

    # --------------------------------------------------
    # REVERSALS
    # --------------------------------------------------

    def void_sale(self, sale_id, reason: str) -> SaleRecord:
        return self._reverse(sale_id, target_status=STATUS_VOIDED, reason=reason)

    def return_sale(self, sale_id, reason: str) -> SaleRecord:
        return self._reverse(sale_id, target_status=STATUS_RETURNED, reason=reason)

    @transaction.atomic
    def _reverse(self, sale_id, *, target_status: str, reason: str) -> SaleRecord:
        """
        FLOW:
        1) Lock the sale and validate the lifecycle transition
        2) Restore stock for every surviving product
        3) Transition status and stamp reason + time
        """
        reason = (reason or "").strip()
        if not reason:
            raise SaleBackendError("A reason is required")

        # --------------------------------------------------
        # 1. LIFECYCLE VALIDATION
        # --------------------------------------------------
        sale = self._load(sale_id, for_update=True)
        try:
            reversal = validate_transition(sale=sale, target_status=target_status)
        except InvalidSaleTransitionError as exc:
            raise BackendTransitionError(str(exc)) from exc

        # --------------------------------------------------
        # 2. STOCK RESTORATION
        # --------------------------------------------------
        for item in sale.items.all():
            if item.product_id is None:
                continue
            Product.objects.filter(pk=item.product_id).update(
                quantity_on_hand=F("quantity_on_hand") + item.quantity
            )

        # --------------------------------------------------
        # 3. STATE TRANSITION
        # --------------------------------------------------
        now = timezone.now()
        sale.status = reversal.status
        setattr(sale, reversal.timestamp_field, now)
        setattr(sale, reversal.reason_field, reason)
        sale.save(update_fields=list(reversal.update_fields))

        logger.info(
            "Sale reversed",
            extra={
                "sale_id": str(sale.id),
                "transaction_number": sale.transaction_number,
                "status": target_status,
            },
        )
        return sale.to_record()
