"""
Service container: one per application, shared by every request.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.cart import CartService
from storefront.checkout import CheckoutService
from storefront.config import Settings
from storefront.notify import Notifier, notifier_from_settings
from storefront.payments import MomoGateway, PaymentService


@dataclass(frozen=True, slots=True)
class Services:
    carts: CartService
    checkout: CheckoutService
    payments: PaymentService

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        *,
        notifier: Notifier | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> Services:
        gateway = MomoGateway(settings.momo, client=http_client)
        return cls(
            carts=CartService(session_factory),
            checkout=CheckoutService(
                session_factory,
                settings,
                notifier if notifier is not None else notifier_from_settings(settings),
            ),
            payments=PaymentService(session_factory, gateway),
        )


__all__ = ("Services",)
