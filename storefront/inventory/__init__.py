"""
Inventory: the only stock mutation path used by checkout.

    from storefront import inventory

    match await inventory.reserve_stock(session, variant_id, 2):
        case Ok(reservation): ...
        case Error(err): ...   # variant_not_found | stock_exceeded
"""

from storefront.inventory._ledger import (
    StockReservation,
    lock_variant,
    reserve_stock,
    release_stock,
)

__all__ = (
    "StockReservation",
    "lock_variant",
    "reserve_stock",
    "release_stock",
)
