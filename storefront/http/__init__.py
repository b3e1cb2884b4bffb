"""
HTTP surface: FastAPI app over the cart, checkout and payment services.

    app = create_app(Settings.load())
    uvicorn.run(app)

Identity is read from X-User-Id / X-User-Role set by an authenticating proxy.
"""

from storefront.http._app import create_app, configure_logging
from storefront.http._auth import (
    identity_from_headers,
    current_identity,
    admin_identity,
)
from storefront.http._handlers import STATUS_BY_KIND, MESSAGES, message_for
from storefront.http._services import Services

__all__ = (
    "create_app",
    "configure_logging",
    "identity_from_headers",
    "current_identity",
    "admin_identity",
    "STATUS_BY_KIND",
    "MESSAGES",
    "message_for",
    "Services",
)
