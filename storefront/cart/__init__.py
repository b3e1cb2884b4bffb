"""
Cart: per-user selection of variants awaiting checkout.

    carts = CartService(session_factory)
    await carts.add_to_cart(user_id, variant_id, 2)
    await carts.select_lines(user_id, [line_id], is_selected=True)
"""

from storefront.cart._service import (
    CartLine,
    Cart,
    CartService,
    find_cart,
    get_or_create_cart,
    cart_lines,
    delete_lines,
    restore_lines,
)

__all__ = (
    "CartLine",
    "Cart",
    "CartService",
    "find_cart",
    "get_or_create_cart",
    "cart_lines",
    "delete_lines",
    "restore_lines",
)
