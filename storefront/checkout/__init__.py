"""
Checkout: orders placed from the cart or a single line, in one transaction.

    checkout = CheckoutService(session_factory, settings, notifier)

    match await checkout.create_order_from_cart(identity, address_id, PaymentMethod.COD):
        case Ok(order):
            print(order.total, order.shipping_fee)
        case Error(e):
            print(e.code)  # cart_empty, invalid_address, stock_exceeded, ...
"""

from storefront.checkout._types import (
    AddressView,
    OrderLine,
    PlacedOrder,
    OrderPage,
)
from storefront.checkout._pricing import items_total, shipping_fee
from storefront.checkout._orchestrator import (
    CheckoutPayment,
    CheckoutService,
    load_order,
)

__all__ = (
    "AddressView",
    "OrderLine",
    "PlacedOrder",
    "OrderPage",
    "items_total",
    "shipping_fee",
    "CheckoutPayment",
    "CheckoutService",
    "load_order",
)
