"""
Domain errors: one exception type, stable machine-readable codes.

Services raise ShopError inside an open transaction (so the session rolls back)
and return it as Error(...) at their boundary. The HTTP layer maps `kind` to a
status code and `code` to a human message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ErrorKind(Enum):
    """Kinds of domain errors."""

    VALIDATION = auto()  # Malformed or inconsistent input
    NOT_FOUND = auto()  # Missing cart/order/address/variant/payment
    CONFLICT = auto()  # Insufficient stock, already paid, bad transition
    SIGNATURE = auto()  # Webhook authentication failure
    GATEWAY = auto()  # Network/parse failure talking to the wallet provider
    UNAUTHORIZED = auto()
    FORBIDDEN = auto()


@dataclass(eq=False)
class ShopError(Exception):
    """
    Domain error with a stable code.

    Note: `detail` carries extra context (e.g. the product name for
    stock_exceeded); it is never used to branch on.
    """

    kind: ErrorKind
    code: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code}: {self.detail}"
        return self.code


class Errors:
    # Cart
    @staticmethod
    def cart_not_found() -> ShopError:
        return ShopError(ErrorKind.NOT_FOUND, "cart_not_found")

    @staticmethod
    def cart_empty() -> ShopError:
        return ShopError(ErrorKind.VALIDATION, "cart_empty")

    @staticmethod
    def cart_item_not_found() -> ShopError:
        return ShopError(ErrorKind.NOT_FOUND, "cart_item_not_found")

    @staticmethod
    def invalid_quantity() -> ShopError:
        return ShopError(ErrorKind.VALIDATION, "invalid_quantity")

    # Catalog / inventory
    @staticmethod
    def variant_not_found(variant_id: int | None = None) -> ShopError:
        detail = str(variant_id) if variant_id is not None else None
        return ShopError(ErrorKind.NOT_FOUND, "variant_not_found", detail)

    @staticmethod
    def stock_exceeded(product_name: str) -> ShopError:
        return ShopError(ErrorKind.CONFLICT, "stock_exceeded", product_name)

    # Address
    @staticmethod
    def invalid_address() -> ShopError:
        return ShopError(ErrorKind.VALIDATION, "invalid_address")

    # Orders
    @staticmethod
    def order_not_found() -> ShopError:
        return ShopError(ErrorKind.NOT_FOUND, "order_not_found")

    @staticmethod
    def order_not_found_or_invalid() -> ShopError:
        return ShopError(ErrorKind.VALIDATION, "order_not_found_or_invalid")

    @staticmethod
    def order_already_paid() -> ShopError:
        return ShopError(ErrorKind.CONFLICT, "order_already_paid")

    @staticmethod
    def order_cannot_be_cancelled() -> ShopError:
        return ShopError(ErrorKind.CONFLICT, "order_cannot_be_cancelled")

    @staticmethod
    def invalid_status(detail: str | None = None) -> ShopError:
        return ShopError(ErrorKind.CONFLICT, "invalid_status", detail)

    # Payments
    @staticmethod
    def payment_not_found() -> ShopError:
        return ShopError(ErrorKind.NOT_FOUND, "payment_not_found")

    @staticmethod
    def invalid_signature() -> ShopError:
        return ShopError(ErrorKind.SIGNATURE, "invalid_signature")

    @staticmethod
    def invalid_payment_amount() -> ShopError:
        return ShopError(ErrorKind.CONFLICT, "invalid_payment_amount")

    @staticmethod
    def momo_error(detail: str) -> ShopError:
        return ShopError(ErrorKind.GATEWAY, "momo_error", detail)

    # Identity
    @staticmethod
    def unauthorized() -> ShopError:
        return ShopError(ErrorKind.UNAUTHORIZED, "unauthorized")

    @staticmethod
    def admin_required() -> ShopError:
        return ShopError(ErrorKind.FORBIDDEN, "admin_required")


__all__ = (
    "ErrorKind",
    "ShopError",
    "Errors",
)
