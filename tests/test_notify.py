"""Tests for order notifications."""

import asyncio

import pytest

from storefront.config import Settings
from storefront.notify import (
    LoggingNotifier,
    OrderConfirmation,
    SmtpNotifier,
    dispatch,
    notifier_from_settings,
)

pytestmark = pytest.mark.anyio

MESSAGE = OrderConfirmation(email="a@example.com", order_id=3, total=400_000, shipping_fee=30_000)


class TestDispatch:
    async def test_delivers(self):
        notifier = LoggingNotifier()

        assert await dispatch(notifier, MESSAGE, timeout=1) is True
        assert notifier.sent == [MESSAGE]

    async def test_failure_is_swallowed(self, caplog):
        class Broken:
            async def send_order_confirmation(self, message):
                raise OSError("connection refused")

        assert await dispatch(Broken(), MESSAGE, timeout=1) is False
        assert "order confirmation for order 3 failed" in caplog.text

    async def test_timeout_is_swallowed(self):
        class Slow:
            async def send_order_confirmation(self, message):
                await asyncio.sleep(10)

        assert await dispatch(Slow(), MESSAGE, timeout=0.01) is False


class TestNotifierFromSettings:
    def test_logging_without_smtp_host(self):
        assert isinstance(notifier_from_settings(Settings(_env_file=None)), LoggingNotifier)

    def test_smtp_with_host(self):
        settings = Settings(_env_file=None, smtp_host="smtp.example.com")

        assert isinstance(notifier_from_settings(settings), SmtpNotifier)

    def test_rendered_mail(self):
        notifier = SmtpNotifier(host="smtp.example.com", port=587, sender="shop@example.com")

        mail = notifier._render(MESSAGE)

        assert mail["To"] == "a@example.com"
        assert mail["Subject"] == "Order #3 confirmed"
        assert "430,000 VND" in mail.get_content()
