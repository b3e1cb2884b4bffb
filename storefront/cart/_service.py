"""
Cart Service: one cart per user, created lazily, lines merged per variant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront._errors import Errors, ShopError
from storefront._types import Result, Ok, Error, Money
from storefront.db import CartTable, CartLineTable, VariantTable

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Views
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    id: int
    variant_id: int
    product_id: int
    product_name: str
    size: str | None
    color: str | None
    unit_price: Money
    quantity: int
    is_selected: bool
    stock: int


@dataclass(frozen=True, slots=True)
class Cart:
    id: int
    user_id: int
    lines: tuple[CartLine, ...]

    @property
    def selected_total(self) -> Money:
        return sum(line.unit_price * line.quantity for line in self.lines if line.is_selected)


# ═══════════════════════════════════════════════════════════════════════════════
# Queries: shared with checkout, always on the caller's session
# ═══════════════════════════════════════════════════════════════════════════════


async def find_cart(session: AsyncSession, user_id: int) -> CartTable | None:
    stmt = select(CartTable).where(CartTable.user_id == user_id)
    return (await session.execute(stmt)).scalar_one_or_none()


_INSERT_IF_ABSENT = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


async def get_or_create_cart(session: AsyncSession, user_id: int) -> CartTable:
    """
    Return the user's cart, creating it on first use.

    Two first requests racing for the same user both end up with the one
    row kept by the unique `user_id` constraint.
    """
    cart = await find_cart(session, user_id)
    if cart is not None:
        return cart

    insert = _INSERT_IF_ABSENT.get(session.get_bind().dialect.name)
    if insert is None:
        cart = CartTable(user_id=user_id)
        session.add(cart)
        await session.flush()
        return cart

    await session.execute(
        insert(CartTable)
        .values(user_id=user_id)
        .on_conflict_do_nothing(index_elements=[CartTable.user_id])
    )
    cart = await find_cart(session, user_id)
    if cart is None:
        raise Errors.cart_not_found()
    return cart


async def cart_lines(
    session: AsyncSession,
    cart_id: int,
    *,
    selected_only: bool = False,
) -> list[CartLineTable]:
    stmt = select(CartLineTable).where(CartLineTable.cart_id == cart_id)
    if selected_only:
        stmt = stmt.where(CartLineTable.is_selected.is_(True))
    stmt = stmt.order_by(CartLineTable.id).execution_options(populate_existing=True)
    return list((await session.execute(stmt)).scalars().all())


async def delete_lines(session: AsyncSession, line_ids: list[int]) -> None:
    if line_ids:
        await session.execute(delete(CartLineTable).where(CartLineTable.id.in_(line_ids)))


async def restore_lines(
    session: AsyncSession,
    user_id: int,
    lines: list[tuple[int, int]],
) -> None:
    """
    Put (variant_id, quantity) pairs back into the user's cart as selected lines.

    A variant added again in the meantime keeps its single line; the restored
    quantity is merged into it.
    """
    cart = await get_or_create_cart(session, user_id)
    existing = {
        line.variant_id: line for line in await cart_lines(session, cart.id)
    }
    for variant_id, quantity in lines:
        line = existing.get(variant_id)
        if line is not None:
            line.quantity += quantity
            line.is_selected = True
            continue
        line = CartLineTable(
            cart_id=cart.id,
            variant_id=variant_id,
            quantity=quantity,
            is_selected=True,
        )
        session.add(line)
        existing[variant_id] = line
    await session.flush()


def _to_line(row: CartLineTable) -> CartLine:
    variant = row.variant
    return CartLine(
        id=row.id,
        variant_id=variant.id,
        product_id=variant.product.id,
        product_name=variant.product.name,
        size=variant.size,
        color=variant.color,
        unit_price=variant.product.price,
        quantity=row.quantity,
        is_selected=row.is_selected,
        stock=variant.stock,
    )


async def _snapshot(session: AsyncSession, cart: CartTable) -> Cart:
    rows = await cart_lines(session, cart.id)
    return Cart(id=cart.id, user_id=cart.user_id, lines=tuple(_to_line(r) for r in rows))


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Service
# ═══════════════════════════════════════════════════════════════════════════════


class CartService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    async def get_cart(self, user_id: int) -> Result[Cart, ShopError]:
        async with self._session() as session, session.begin():
            cart = await get_or_create_cart(session, user_id)
            return Ok(await _snapshot(session, cart))

    async def add_to_cart(
        self,
        user_id: int,
        variant_id: int,
        quantity: int = 1,
    ) -> Result[Cart, ShopError]:
        """Add a variant; an existing line for the same variant accumulates."""
        try:
            async with self._session() as session, session.begin():
                if quantity < 1:
                    raise Errors.invalid_quantity()

                variant = await session.get(VariantTable, variant_id)
                if variant is None or not variant.product.is_active:
                    raise Errors.variant_not_found(variant_id)

                cart = await get_or_create_cart(session, user_id)
                existing = (
                    await session.execute(
                        select(CartLineTable).where(
                            CartLineTable.cart_id == cart.id,
                            CartLineTable.variant_id == variant_id,
                        )
                    )
                ).scalars().first()

                merged = quantity + (existing.quantity if existing else 0)
                if merged > variant.stock:
                    raise Errors.stock_exceeded(variant.product.name)

                if existing is not None:
                    existing.quantity = merged
                else:
                    session.add(
                        CartLineTable(cart_id=cart.id, variant_id=variant_id, quantity=quantity)
                    )
                await session.flush()
                snapshot = await _snapshot(session, cart)
        except ShopError as e:
            return Error(e)
        return Ok(snapshot)

    async def update_line(
        self,
        user_id: int,
        line_id: int,
        quantity: int,
    ) -> Result[Cart, ShopError]:
        try:
            async with self._session() as session, session.begin():
                if quantity < 1:
                    raise Errors.invalid_quantity()
                cart, line = await self._owned_line(session, user_id, line_id)
                if quantity > line.variant.stock:
                    raise Errors.stock_exceeded(line.variant.product.name)
                line.quantity = quantity
                await session.flush()
                snapshot = await _snapshot(session, cart)
        except ShopError as e:
            return Error(e)
        return Ok(snapshot)

    async def remove_line(self, user_id: int, line_id: int) -> Result[Cart, ShopError]:
        try:
            async with self._session() as session, session.begin():
                cart, line = await self._owned_line(session, user_id, line_id)
                await session.delete(line)
                await session.flush()
                snapshot = await _snapshot(session, cart)
        except ShopError as e:
            return Error(e)
        return Ok(snapshot)

    async def select_lines(
        self,
        user_id: int,
        line_ids: list[int],
        is_selected: bool,
    ) -> Result[Cart, ShopError]:
        try:
            async with self._session() as session, session.begin():
                cart = await find_cart(session, user_id)
                if cart is None:
                    raise Errors.cart_not_found()
                await session.execute(
                    update(CartLineTable)
                    .where(CartLineTable.cart_id == cart.id, CartLineTable.id.in_(line_ids))
                    .values(is_selected=is_selected)
                    .execution_options(synchronize_session=False)
                )
                snapshot = await _snapshot(session, cart)
        except ShopError as e:
            return Error(e)
        return Ok(snapshot)

    async def _owned_line(
        self,
        session: AsyncSession,
        user_id: int,
        line_id: int,
    ) -> tuple[CartTable, CartLineTable]:
        cart = await find_cart(session, user_id)
        if cart is None:
            raise Errors.cart_item_not_found()
        line = await session.get(CartLineTable, line_id)
        if line is None or line.cart_id != cart.id:
            raise Errors.cart_item_not_found()
        return cart, line


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
