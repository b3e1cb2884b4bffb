"""
Order notifications: sent after commit, never fatal.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Protocol

from storefront._types import Money
from storefront.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    email: str
    order_id: int
    total: Money
    shipping_fee: Money


class Notifier(Protocol):
    async def send_order_confirmation(self, message: OrderConfirmation) -> None: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Implementations
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class LoggingNotifier:
    """Records confirmations instead of sending them (dev / tests)."""

    sent: list[OrderConfirmation] = field(default_factory=list[OrderConfirmation])

    async def send_order_confirmation(self, message: OrderConfirmation) -> None:
        self.sent.append(message)
        logger.info(
            "order confirmation for order %s to %s (total=%s, shipping=%s)",
            message.order_id,
            message.email,
            message.total,
            message.shipping_fee,
        )


class SmtpNotifier:
    """Plain SMTP delivery; the blocking client runs in a worker thread."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._use_tls = use_tls

    async def send_order_confirmation(self, message: OrderConfirmation) -> None:
        await asyncio.to_thread(self._send, self._render(message))

    def _render(self, message: OrderConfirmation) -> EmailMessage:
        grand_total = message.total + message.shipping_fee
        mail = EmailMessage()
        mail["From"] = self._sender
        mail["To"] = message.email
        mail["Subject"] = f"Order #{message.order_id} confirmed"
        mail.set_content(
            f"Thank you for your order #{message.order_id}.\n\n"
            f"Items total: {message.total:,} VND\n"
            f"Shipping fee: {message.shipping_fee:,} VND\n"
            f"Amount due: {grand_total:,} VND\n"
        )
        return mail

    def _send(self, mail: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=30) as client:
            if self._use_tls:
                client.starttls()
            if self._user and self._password:
                client.login(self._user, self._password)
            client.send_message(mail)


def notifier_from_settings(settings: Settings) -> Notifier:
    if not settings.smtp_host:
        return LoggingNotifier()
    password = settings.smtp_password.get_secret_value() if settings.smtp_password else None
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.smtp_sender,
        user=settings.smtp_user,
        password=password,
        use_tls=settings.smtp_use_tls,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Fire-and-forget dispatch
# ═══════════════════════════════════════════════════════════════════════════════


async def dispatch(notifier: Notifier, message: OrderConfirmation, timeout: float) -> bool:
    """
    Send a confirmation, swallowing and logging any failure.

    Must be called after the order transaction has committed.
    Returns True if the notifier reported success.
    """
    try:
        await asyncio.wait_for(notifier.send_order_confirmation(message), timeout)
    except Exception:
        logger.exception("order confirmation for order %s failed", message.order_id)
        return False
    return True


__all__ = (
    "OrderConfirmation",
    "Notifier",
    "LoggingNotifier",
    "SmtpNotifier",
    "notifier_from_settings",
    "dispatch",
)
