"""
Inventory ledger: atomic check-and-decrement of per-variant stock.

Every function takes the caller's session: the lock and the decrement belong
to the caller's transaction and are released by its commit or rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from storefront._errors import Errors, ShopError
from storefront._types import Result, Ok, Error, Money
from storefront.db import VariantTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StockReservation:
    """Stock taken for one line, priced at the moment of reservation."""

    variant_id: int
    product_id: int
    product_name: str
    unit_price: Money
    quantity: int

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════════════════════


async def lock_variant(session: AsyncSession, variant_id: int) -> VariantTable | None:
    """SELECT ... FOR UPDATE on the variant row, refreshing any cached copy."""
    stmt = (
        select(VariantTable)
        .where(VariantTable.id == variant_id)
        .with_for_update(of=VariantTable)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


# ═══════════════════════════════════════════════════════════════════════════════
# Mutations
# ═══════════════════════════════════════════════════════════════════════════════


async def reserve_stock(
    session: AsyncSession,
    variant_id: int,
    quantity: int,
) -> Result[StockReservation, ShopError]:
    """
    Lock the variant, check stock, decrement it.

    Returns:
        Ok(StockReservation): stock decremented inside the caller's transaction
        Error(variant_not_found): missing variant or inactive product
        Error(stock_exceeded): not enough stock; nothing was changed

    Note: the decrement is a guarded UPDATE (stock >= quantity) so it stays
    correct on backends that ignore FOR UPDATE.
    """
    if quantity < 1:
        return Error(Errors.invalid_quantity())

    variant = await lock_variant(session, variant_id)
    if variant is None or not variant.product.is_active:
        return Error(Errors.variant_not_found(variant_id))

    product = variant.product
    if variant.stock < quantity:
        logger.info(
            "stock exceeded: variant=%s requested=%s available=%s",
            variant_id,
            quantity,
            variant.stock,
        )
        return Error(Errors.stock_exceeded(product.name))

    stmt = (
        update(VariantTable)
        .where(VariantTable.id == variant_id, VariantTable.stock >= quantity)
        .values(stock=VariantTable.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    cursor = cast(CursorResult[Any], await session.execute(stmt))
    if cursor.rowcount != 1:
        return Error(Errors.stock_exceeded(product.name))

    return Ok(
        StockReservation(
            variant_id=variant.id,
            product_id=product.id,
            product_name=product.name,
            unit_price=product.price,
            quantity=quantity,
        )
    )


async def release_stock(session: AsyncSession, variant_id: int, quantity: int) -> None:
    """Give reserved stock back (compensation of a committed reservation)."""
    await session.execute(
        update(VariantTable)
        .where(VariantTable.id == variant_id)
        .values(stock=VariantTable.stock + quantity)
        .execution_options(synchronize_session=False)
    )


__all__ = (
    "StockReservation",
    "lock_variant",
    "reserve_stock",
    "release_stock",
)
