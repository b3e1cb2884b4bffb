"""
Order pricing.
"""

from __future__ import annotations

from collections.abc import Iterable

from storefront._types import Money
from storefront.inventory import StockReservation


def items_total(reservations: Iterable[StockReservation]) -> Money:
    return sum(r.subtotal for r in reservations)


def shipping_fee(total: Money, *, threshold: Money, fee: Money) -> Money:
    """Flat fee below the free-shipping threshold, zero at or above it."""
    return fee if total < threshold else 0


__all__ = ("items_total", "shipping_fee")
