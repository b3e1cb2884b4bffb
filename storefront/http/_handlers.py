"""
Error translation: ShopError kind → HTTP status, code → English message.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront._errors import ErrorKind, ShopError
from storefront.http._schemas import ErrorOut

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.SIGNATURE: 400,
    ErrorKind.GATEWAY: 502,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
}

MESSAGES: dict[str, str] = {
    "cart_not_found": "Cart not found",
    "cart_empty": "No selected items in the cart",
    "cart_item_not_found": "Cart item not found",
    "invalid_quantity": "Quantity must be at least 1",
    "variant_not_found": "Product variant not found",
    "stock_exceeded": "Not enough stock",
    "invalid_address": "Address not found or does not belong to you",
    "order_not_found": "Order not found",
    "order_not_found_or_invalid": "Order not found or not payable",
    "order_already_paid": "Order has already been paid",
    "order_cannot_be_cancelled": "Only pending orders can be cancelled",
    "invalid_status": "Invalid order status transition",
    "payment_not_found": "Payment not found",
    "invalid_signature": "Invalid signature",
    "invalid_payment_amount": "Payment amount does not match",
    "momo_error": "Payment provider error",
    "unauthorized": "Authentication required",
    "admin_required": "Admin access required",
    "validation_error": "Invalid request",
}


def message_for(code: str) -> str:
    return MESSAGES.get(code, code.replace("_", " ").capitalize())


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    status = STATUS_BY_KIND[exc.kind]
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    # Gateway details can carry provider internals, keep them in the log only.
    detail = exc.detail if exc.kind is not ErrorKind.GATEWAY else None
    body = ErrorOut(code=exc.code, message=message_for(exc.code), detail=detail)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    body = ErrorOut(code="validation_error", message=message_for("validation_error"), detail=detail)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)


__all__ = (
    "STATUS_BY_KIND",
    "MESSAGES",
    "message_for",
    "install_error_handlers",
)
