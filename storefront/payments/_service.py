"""
Payment Session service: initiation, webhook confirmation, cancellation.

The provider is called between two transactions: the first validates the
order, the second re-validates it under lock and records the session. No
database transaction is held open across the network call, and a session
row is written only after the provider has accepted the request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront._errors import Errors, ShopError
from storefront._types import (
    Result,
    Ok,
    Error,
    Identity,
    Money,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from storefront.db import OrderTable, PaymentTable
from storefront.payments._gateway import MomoGateway
from storefront.payments._types import PaymentInitiation, PaymentView, WebhookAck

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("storefront.payments.security")


# ═══════════════════════════════════════════════════════════════════════════════
# Session helpers
# ═══════════════════════════════════════════════════════════════════════════════


async def _lock_order(session: AsyncSession, order_id: int) -> OrderTable | None:
    stmt = (
        select(OrderTable)
        .where(OrderTable.id == order_id)
        .with_for_update(of=OrderTable)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def _lock_payment(session: AsyncSession, *criteria: Any) -> PaymentTable | None:
    stmt = (
        select(PaymentTable)
        .where(*criteria)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def _payable_order(
    session: AsyncSession,
    identity: Identity,
    order_id: int,
) -> tuple[OrderTable, PaymentTable | None]:
    order = await _lock_order(session, order_id)
    if (
        order is None
        or order.user_id != identity.user_id
        or order.status != OrderStatus.PENDING.value
    ):
        raise Errors.order_not_found_or_invalid()

    payment = await _lock_payment(session, PaymentTable.order_id == order_id)
    if payment is not None and payment.status == PaymentStatus.COMPLETED.value:
        raise Errors.order_already_paid()
    return order, payment


def _int_field(payload: Mapping[str, Any], key: str) -> int | None:
    try:
        return int(payload[key])
    except (KeyError, TypeError, ValueError):
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Service
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: MomoGateway,
    ) -> None:
        self._session = session_factory
        self._gateway = gateway

    async def initiate_payment(
        self,
        identity: Identity,
        order_id: int,
    ) -> Result[PaymentInitiation, ShopError]:
        """
        Start a wallet payment for a pending order owned by the caller.

        Returns:
            Ok(PaymentInitiation): session recorded as pending, approval URL to redirect to
            Error(order_not_found_or_invalid | order_already_paid): nothing written
            Error(momo_error): provider unreachable or refused; nothing written
        """
        try:
            async with self._session() as session, session.begin():
                order, _ = await _payable_order(session, identity, order_id)
                amount: Money = order.total + order.shipping_fee
        except ShopError as e:
            return Error(e)

        request = self._gateway.new_request(order_id, amount)
        match await self._gateway.create_payment(request):
            case Ok(link):
                pass
            case Error(e):
                logger.warning("payment initiation for order %s failed: %s", order_id, e)
                return Error(e)

        try:
            async with self._session() as session, session.begin():
                # The order may have been cancelled or paid while the provider was called.
                order, payment = await _payable_order(session, identity, order_id)
                if payment is None:
                    payment = PaymentTable(order_id=order.id)
                    session.add(payment)
                payment.payment_method = PaymentMethod.MOMO.value
                payment.amount = amount
                payment.status = PaymentStatus.PENDING.value
                payment.request_id = request.request_id
                payment.provider_transaction_id = None
                await session.flush()
                initiation = PaymentInitiation(
                    payment_id=payment.id,
                    order_id=order.id,
                    request_id=request.request_id,
                    amount=amount,
                    approval_url=link.pay_url,
                )
        except ShopError as e:
            logger.warning(
                "order %s changed during payment initiation (%s), provider request %s abandoned",
                order_id,
                e,
                request.request_id,
            )
            return Error(e)

        logger.info(
            "payment %s initiated for order %s (request %s, amount %s)",
            initiation.payment_id,
            order_id,
            request.request_id,
            amount,
        )
        return Ok(initiation)

    async def confirm_payment(self, payload: Mapping[str, Any]) -> Result[WebhookAck, ShopError]:
        """
        Apply a provider notification.

        The signature is checked before anything is read. Session and order
        are then re-read under lock, so duplicate or concurrent deliveries
        apply at most one transition.
        """
        if not self._gateway.verify_confirmation(payload):
            security_logger.warning(
                "rejected payment notification with invalid signature (requestId=%r, orderId=%r)",
                payload.get("requestId"),
                payload.get("orderId"),
            )
            return Error(Errors.invalid_signature())

        request_id = str(payload.get("requestId", ""))
        result_code = _int_field(payload, "resultCode")

        try:
            async with self._session() as session, session.begin():
                payment = await _lock_payment(session, PaymentTable.request_id == request_id)
                if payment is None:
                    raise Errors.payment_not_found()
                order = await _lock_order(session, payment.order_id)
                if order is None:
                    raise Errors.order_not_found()

                ack = self._apply(payment, order, payload, result_code)
                await session.flush()
        except ShopError as e:
            logger.warning("payment notification %s rejected: %s", request_id, e)
            return Error(e)

        return Ok(ack)

    def _apply(
        self,
        payment: PaymentTable,
        order: OrderTable,
        payload: Mapping[str, Any],
        result_code: int | None,
    ) -> WebhookAck:
        status = PaymentStatus(payment.status)

        if status is PaymentStatus.COMPLETED:
            logger.info("duplicate notification for payment %s ignored", payment.id)
            return WebhookAck(order.id, payment.id, status, duplicate=True)

        if result_code != 0:
            if status is PaymentStatus.PENDING:
                payment.status = PaymentStatus.FAILED.value
                logger.info(
                    "payment %s failed at provider (resultCode=%s)", payment.id, result_code
                )
                return WebhookAck(order.id, payment.id, PaymentStatus.FAILED)
            return WebhookAck(order.id, payment.id, status, duplicate=True)

        if _int_field(payload, "amount") != payment.amount:
            raise Errors.invalid_payment_amount()

        if status is PaymentStatus.FAILED:
            logger.error(
                "provider reports success for failed payment %s (order %s, transId=%s)",
                payment.id,
                order.id,
                payload.get("transId"),
            )
            return WebhookAck(order.id, payment.id, status, duplicate=True)

        payment.status = PaymentStatus.COMPLETED.value
        payment.provider_transaction_id = str(payload.get("transId", "")) or None
        if order.status == OrderStatus.PENDING.value:
            order.status = OrderStatus.COMPLETED.value
        else:
            logger.error(
                "payment %s completed but order %s is %s; refund required",
                payment.id,
                order.id,
                order.status,
            )
        logger.info("payment %s completed for order %s", payment.id, order.id)
        return WebhookAck(order.id, payment.id, PaymentStatus.COMPLETED)

    async def cancel_payment(self, order_id: int) -> Result[PaymentView | None, ShopError]:
        """Mark the order's pending session failed. The order itself stays pending."""
        async with self._session() as session, session.begin():
            payment = await _lock_payment(session, PaymentTable.order_id == order_id)
            if payment is None:
                return Ok(None)
            if payment.status == PaymentStatus.PENDING.value:
                payment.status = PaymentStatus.FAILED.value
                await session.flush()
                logger.info("payment %s for order %s cancelled", payment.id, order_id)
            return Ok(PaymentView.from_row(payment))

    async def get_payment(self, identity: Identity, order_id: int) -> Result[PaymentView, ShopError]:
        async with self._session() as session:
            order = await session.get(OrderTable, order_id)
            if order is None or (order.user_id != identity.user_id and not identity.is_admin):
                return Error(Errors.order_not_found())
            payment = (
                await session.execute(select(PaymentTable).where(PaymentTable.order_id == order_id))
            ).scalar_one_or_none()
            if payment is None:
                return Error(Errors.payment_not_found())
            return Ok(PaymentView.from_row(payment))


__all__ = ("PaymentService",)
