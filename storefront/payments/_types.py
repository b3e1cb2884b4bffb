"""
Payment read models.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront._types import Money, PaymentMethod, PaymentStatus
from storefront.db import PaymentTable


@dataclass(frozen=True, slots=True)
class PaymentView:
    id: int
    order_id: int
    method: PaymentMethod
    amount: Money
    status: PaymentStatus
    request_id: str | None
    provider_transaction_id: str | None

    @classmethod
    def from_row(cls, row: PaymentTable) -> PaymentView:
        return cls(
            id=row.id,
            order_id=row.order_id,
            method=PaymentMethod(row.payment_method),
            amount=row.amount,
            status=PaymentStatus(row.status),
            request_id=row.request_id,
            provider_transaction_id=row.provider_transaction_id,
        )


@dataclass(frozen=True, slots=True)
class PaymentInitiation:
    payment_id: int
    order_id: int
    request_id: str
    amount: Money
    approval_url: str


@dataclass(frozen=True, slots=True)
class WebhookAck:
    """
    Answer to a provider notification.

    `duplicate` is True when the notification changed nothing because the
    session had already reached a terminal state.
    """

    order_id: int
    payment_id: int
    status: PaymentStatus
    duplicate: bool = False


__all__ = (
    "PaymentView",
    "PaymentInitiation",
    "WebhookAck",
)
