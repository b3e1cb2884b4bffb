"""
FastAPI application factory.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from storefront.config import Settings
from storefront.db import create_database
from storefront.http._auth import trusted_header_identity
from storefront.http._handlers import install_error_handlers
from storefront.http._routes import cart_router, orders_router, payments_router
from storefront.http._services import Services

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """
    Build the application.

    With `services` given the app uses them as-is (tests, embedding). Otherwise
    the lifespan opens the database and a shared httpx client and closes them
    on shutdown.
    """
    settings = settings if settings is not None else Settings.load()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if services is not None:
            yield
            return

        session_factory, engine = await create_database(
            settings.database_url,
            isolation_level=settings.isolation_level,
            create_tables=settings.create_tables,
        )
        try:
            async with httpx.AsyncClient(timeout=settings.momo.timeout_seconds) as client:
                app.state.services = Services.build(session_factory, settings, http_client=client)
                logger.info("storefront started (database %s)", engine.url.render_as_string())
                yield
        finally:
            await engine.dispose()

    app = FastAPI(title="Storefront", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    app.middleware("http")(trusted_header_identity)
    install_error_handlers(app)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    return app


__all__ = ("create_app", "configure_logging")
