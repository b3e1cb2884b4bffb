"""
storefront: clothing store backend: cart, checkout, MoMo wallet payments.

    from storefront import checkout   # Orders from cart / buy-now
    from storefront import payments   # Wallet sessions and webhooks
    from storefront.saga import Saga  # Compensated multi-transaction flows

    from storefront.http import create_app
"""

from storefront import inventory
from storefront import cart
from storefront import notify
from storefront import saga
from storefront import payments
from storefront import checkout
from storefront._errors import ErrorKind, ShopError, Errors
from storefront._types import (
    Identity,
    Role,
    Money,
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
)

__version__ = "0.1.0"

__all__ = (
    "inventory",
    "cart",
    "notify",
    "saga",
    "payments",
    "checkout",
    "ErrorKind",
    "ShopError",
    "Errors",
    "Identity",
    "Role",
    "Money",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
)
