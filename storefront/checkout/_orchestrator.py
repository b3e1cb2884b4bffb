"""
Checkout Orchestrator: cart or single line → stock → order, in one transaction.

Every helper receives the caller's session. A ShopError raised inside
`session.begin()` rolls the whole attempt back (reservations, order rows,
cart deletions) and is returned as Error(...) at the method boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront import cart as carts
from storefront import inventory
from storefront import notify
from storefront.saga import Saga
from storefront._errors import Errors, ShopError
from storefront._types import (
    Result,
    Ok,
    Error,
    Identity,
    OrderStatus,
    PaymentMethod,
)
from storefront.checkout._pricing import items_total, shipping_fee
from storefront.checkout._types import PlacedOrder, OrderPage
from storefront.config import Settings
from storefront.db import AddressTable, OrderLineTable, OrderTable, UserTable

if TYPE_CHECKING:
    from storefront.payments import PaymentInitiation, PaymentService

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutPayment:
    """Order placed from the cart with its wallet payment already initiated."""

    order: PlacedOrder
    payment: PaymentInitiation


@dataclass(frozen=True, slots=True)
class _Placement:
    order: PlacedOrder
    recipient: str | None
    # (variant_id, quantity) of the cart lines consumed by the order
    cart_lines: tuple[tuple[int, int], ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Session helpers
# ═══════════════════════════════════════════════════════════════════════════════


async def load_order(
    session: AsyncSession,
    order_id: int,
    *,
    lock: bool = False,
) -> OrderTable | None:
    """Fresh read of an order with address and lines; FOR UPDATE when lock=True."""
    stmt = (
        select(OrderTable)
        .where(OrderTable.id == order_id)
        .execution_options(populate_existing=True)
    )
    if lock:
        stmt = stmt.with_for_update(of=OrderTable)
    return (await session.execute(stmt)).scalar_one_or_none()


async def _owned_address(session: AsyncSession, user_id: int, address_id: int) -> AddressTable:
    address = await session.get(AddressTable, address_id)
    if address is None or address.user_id != user_id:
        raise Errors.invalid_address()
    return address


async def _reserve_all(
    session: AsyncSession,
    wanted: list[tuple[int, int]],
) -> list[inventory.StockReservation]:
    # Sequential on purpose: a later failure rolls back the earlier decrements.
    reservations: list[inventory.StockReservation] = []
    for variant_id, quantity in wanted:
        match await inventory.reserve_stock(session, variant_id, quantity):
            case Ok(reservation):
                reservations.append(reservation)
            case Error(e):
                raise e
    return reservations


async def _recipient(session: AsyncSession, user_id: int) -> str | None:
    user = await session.get(UserTable, user_id)
    return user.email if user is not None else None


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Service
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        notifier: notify.Notifier,
    ) -> None:
        self._session = session_factory
        self._settings = settings
        self._notifier = notifier

    # ─── Placement ──────────────────────────────────────────────────────────

    async def create_order_from_cart(
        self,
        identity: Identity,
        address_id: int,
        payment_method: PaymentMethod,
    ) -> Result[PlacedOrder, ShopError]:
        """
        Turn the selected cart lines into a pending order.

        Returns:
            Ok(PlacedOrder): committed; selected cart lines removed
            Error(cart_not_found | cart_empty | invalid_address | stock_exceeded | variant_not_found)
        """
        match await self._place_from_cart(identity, address_id, payment_method):
            case Ok(placement):
                await self._send_confirmation(placement)
                return Ok(placement.order)
            case Error(e):
                return Error(e)

    async def buy_now(
        self,
        identity: Identity,
        variant_id: int,
        quantity: int,
        address_id: int,
        payment_method: PaymentMethod,
    ) -> Result[PlacedOrder, ShopError]:
        """Same as create_order_from_cart for a single ad-hoc line. The cart is untouched."""
        try:
            async with self._session() as session, session.begin():
                address = await _owned_address(session, identity.user_id, address_id)
                reservations = await _reserve_all(session, [(variant_id, quantity)])
                order = await self._insert_order(
                    session, identity.user_id, address, reservations, payment_method
                )
                placement = _Placement(
                    order=order,
                    recipient=await _recipient(session, identity.user_id),
                )
        except ShopError as e:
            logger.info("buy-now failed for user %s: %s", identity.user_id, e)
            return Error(e)

        logger.info("order %s placed (buy-now) by user %s", order.id, identity.user_id)
        await self._send_confirmation(placement)
        return Ok(placement.order)

    async def _place_from_cart(
        self,
        identity: Identity,
        address_id: int,
        payment_method: PaymentMethod,
    ) -> Result[_Placement, ShopError]:
        try:
            async with self._session() as session, session.begin():
                cart = await carts.find_cart(session, identity.user_id)
                if cart is None:
                    raise Errors.cart_not_found()

                lines = await carts.cart_lines(session, cart.id, selected_only=True)
                if not lines:
                    raise Errors.cart_empty()

                address = await _owned_address(session, identity.user_id, address_id)
                wanted = [(line.variant_id, line.quantity) for line in lines]
                reservations = await _reserve_all(session, wanted)
                order = await self._insert_order(
                    session, identity.user_id, address, reservations, payment_method
                )
                await carts.delete_lines(session, [line.id for line in lines])

                placement = _Placement(
                    order=order,
                    recipient=await _recipient(session, identity.user_id),
                    cart_lines=tuple(wanted),
                )
        except ShopError as e:
            logger.info("checkout failed for user %s: %s", identity.user_id, e)
            return Error(e)

        logger.info(
            "order %s placed from cart by user %s (total=%s, shipping=%s)",
            placement.order.id,
            identity.user_id,
            placement.order.total,
            placement.order.shipping_fee,
        )
        return Ok(placement)

    async def _insert_order(
        self,
        session: AsyncSession,
        user_id: int,
        address: AddressTable,
        reservations: list[inventory.StockReservation],
        payment_method: PaymentMethod,
    ) -> PlacedOrder:
        total = items_total(reservations)
        order = OrderTable(
            user_id=user_id,
            address_id=address.id,
            total=total,
            shipping_fee=shipping_fee(
                total,
                threshold=self._settings.free_shipping_threshold,
                fee=self._settings.shipping_fee,
            ),
            payment_method=payment_method.value,
            status=OrderStatus.PENDING.value,
        )
        session.add(order)
        await session.flush()

        session.add_all(
            OrderLineTable(
                order_id=order.id,
                variant_id=r.variant_id,
                quantity=r.quantity,
                unit_price=r.unit_price,
            )
            for r in reservations
        )
        await session.flush()

        loaded = await load_order(session, order.id)
        if loaded is None:
            raise Errors.order_not_found()
        return PlacedOrder.from_row(loaded)

    async def _send_confirmation(self, placement: _Placement) -> None:
        if placement.recipient is None:
            logger.warning("order %s has no recipient, confirmation skipped", placement.order.id)
            return
        await notify.dispatch(
            self._notifier,
            notify.OrderConfirmation(
                email=placement.recipient,
                order_id=placement.order.id,
                total=placement.order.total,
                shipping_fee=placement.order.shipping_fee,
            ),
            timeout=self._settings.notify_timeout_seconds,
        )

    # ─── Status transitions ─────────────────────────────────────────────────

    async def cancel_order(self, identity: Identity, order_id: int) -> Result[PlacedOrder, ShopError]:
        """User cancel, pending only. Reserved stock is not returned."""
        try:
            async with self._session() as session, session.begin():
                order = await load_order(session, order_id, lock=True)
                if order is None or order.user_id != identity.user_id:
                    raise Errors.order_not_found()
                if order.status != OrderStatus.PENDING.value:
                    raise Errors.order_cannot_be_cancelled()
                order.status = OrderStatus.CANCELLED.value
                await session.flush()
                placed = PlacedOrder.from_row(order)
        except ShopError as e:
            return Error(e)

        logger.info("order %s cancelled by user %s", order_id, identity.user_id)
        return Ok(placed)

    async def update_order_status(
        self,
        identity: Identity,
        order_id: int,
        status: OrderStatus,
    ) -> Result[PlacedOrder, ShopError]:
        """Admin override: pending → completed | cancelled."""
        try:
            async with self._session() as session, session.begin():
                if not identity.is_admin:
                    raise Errors.admin_required()
                order = await load_order(session, order_id, lock=True)
                if order is None:
                    raise Errors.order_not_found()
                current = OrderStatus(order.status)
                if current.is_terminal or status is OrderStatus.PENDING:
                    raise Errors.invalid_status(f"{current.value} -> {status.value}")
                order.status = status.value
                await session.flush()
                placed = PlacedOrder.from_row(order)
        except ShopError as e:
            return Error(e)

        logger.info("order %s set to %s by admin %s", order_id, status.value, identity.user_id)
        return Ok(placed)

    # ─── Queries ────────────────────────────────────────────────────────────

    async def get_order(self, identity: Identity, order_id: int) -> Result[PlacedOrder, ShopError]:
        async with self._session() as session:
            order = await load_order(session, order_id)
            if order is None or (order.user_id != identity.user_id and not identity.is_admin):
                return Error(Errors.order_not_found())
            return Ok(PlacedOrder.from_row(order))

    async def list_user_orders(
        self,
        identity: Identity,
        page: int = 1,
        limit: int = 10,
    ) -> Result[OrderPage, ShopError]:
        return Ok(await self._page([OrderTable.user_id == identity.user_id], page, limit))

    async def list_orders(
        self,
        identity: Identity,
        *,
        status: OrderStatus | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Result[OrderPage, ShopError]:
        if not identity.is_admin:
            return Error(Errors.admin_required())
        criteria: list[Any] = []
        if status is not None:
            criteria.append(OrderTable.status == status.value)
        if user_id is not None:
            criteria.append(OrderTable.user_id == user_id)
        return Ok(await self._page(criteria, page, limit))

    async def _page(self, criteria: list[Any], page: int, limit: int) -> OrderPage:
        page = max(page, 1)
        limit = max(limit, 1)
        async with self._session() as session:
            count_stmt = select(func.count()).select_from(OrderTable).where(*criteria)
            total_count = (await session.execute(count_stmt)).scalar_one()
            stmt = (
                select(OrderTable)
                .where(*criteria)
                .order_by(OrderTable.created_at.desc(), OrderTable.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return OrderPage(
                orders=tuple(PlacedOrder.from_row(row) for row in rows),
                page=page,
                limit=limit,
                total_count=total_count,
            )

    # ─── Checkout and pay ───────────────────────────────────────────────────

    async def checkout_and_pay(
        self,
        identity: Identity,
        address_id: int,
        payments: PaymentService,
    ) -> Result[CheckoutPayment, ShopError]:
        """
        Place a wallet order from the cart, then initiate its payment.

        If initiation fails, the order is cancelled, its stock released and
        the consumed cart lines restored, so the caller can simply retry.
        """
        saga = Saga(f"checkout-and-pay:user={identity.user_id}")
        placed = await saga.stage(
            "place-order",
            self._place_from_cart(identity, address_id, PaymentMethod.MOMO),
            undo=self._revert_placement,
        )
        match placed:
            case Error(e):
                return Error(e)
            case Ok(placement):
                paid = await saga.stage(
                    "initiate-payment",
                    payments.initiate_payment(identity, placement.order.id),
                )

        match paid:
            case Ok(initiation):
                await self._send_confirmation(placement)
                return Ok(CheckoutPayment(order=placement.order, payment=initiation))
            case Error(e):
                rollback = await saga.rollback()
                logger.warning(
                    "checkout-and-pay for user %s failed at payment (%s), order %s rollback complete: %s",
                    identity.user_id,
                    e,
                    placement.order.id,
                    rollback.complete,
                )
                return Error(e)

    async def _revert_placement(self, placement: _Placement) -> None:
        async with self._session() as session, session.begin():
            order = await load_order(session, placement.order.id, lock=True)
            if order is None or order.status != OrderStatus.PENDING.value:
                logger.warning("order %s not pending, revert skipped", placement.order.id)
                return
            order.status = OrderStatus.CANCELLED.value
            for line in order.lines:
                await inventory.release_stock(session, line.variant_id, line.quantity)
            await carts.restore_lines(session, order.user_id, list(placement.cart_lines))
        logger.info("order %s reverted: stock released, cart restored", placement.order.id)


__all__ = (
    "CheckoutPayment",
    "CheckoutService",
    "load_order",
)
