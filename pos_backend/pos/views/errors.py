# pos/views/errors.py

"""
API ERROR NORMALIZATION

Every register-engine error is returned as
    {"error": {"code": ..., "message": ...}}
with a 4xx/5xx status. Order matters: subclasses before their bases.
"""

from rest_framework import status
from rest_framework.response import Response

from catalog.services.stock_guard import StockExceededError
from pos.services.exceptions import (
    CheckoutInProgressError,
    EmptyCartError,
    HoldNotFoundError,
    InsufficientTenderError,
    InvalidCheckoutTransitionError,
    RegisterError,
    RegisterValidationError,
    RequestFailedError,
)
from quotes.services.exceptions import QuoteNotFoundError, QuoteNotPendingError
from sales.services.backend import SaleNotFoundError

ERROR_CODES = (
    (StockExceededError, "STOCK_EXCEEDED", status.HTTP_409_CONFLICT),
    (EmptyCartError, "EMPTY_CART", status.HTTP_400_BAD_REQUEST),
    (InsufficientTenderError, "INSUFFICIENT_TENDER", status.HTTP_400_BAD_REQUEST),
    (RegisterValidationError, "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST),
    (HoldNotFoundError, "HOLD_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (QuoteNotFoundError, "QUOTE_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (SaleNotFoundError, "SALE_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (QuoteNotPendingError, "QUOTE_NOT_PENDING", status.HTTP_409_CONFLICT),
    (CheckoutInProgressError, "CHECKOUT_IN_PROGRESS", status.HTTP_409_CONFLICT),
    (InvalidCheckoutTransitionError, "INVALID_CHECKOUT_TRANSITION", status.HTTP_409_CONFLICT),
    (RequestFailedError, "REQUEST_FAILED", status.HTTP_502_BAD_GATEWAY),
    (RegisterError, "REGISTER_ERROR", status.HTTP_400_BAD_REQUEST),
)

HANDLED_ERRORS = (StockExceededError, RegisterError, SaleNotFoundError)


def error_response(*, code: str, message: str, http_status: int, **details):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    body.update(details)
    return Response({"error": body}, status=http_status)


def register_error_response(exc: Exception):
    for error_class, code, http_status in ERROR_CODES:
        if isinstance(exc, error_class):
            break
    else:
        raise exc

    details = {}
    if isinstance(exc, StockExceededError):
        details = {"product_id": exc.product_id, "available": exc.available, "requested": exc.requested}
    elif isinstance(exc, InsufficientTenderError):
        details = {"total": str(exc.total), "amount_tendered": str(exc.amount_tendered)}

    return error_response(code=code, message=str(exc), http_status=http_status, **details)
