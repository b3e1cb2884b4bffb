"""
Identity: trusted from an upstream authenticating proxy.

The proxy verifies credentials and forwards the caller as X-User-Id /
X-User-Role headers. Requests without a valid X-User-Id carry no identity.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request, Response

from storefront._errors import Errors
from storefront._types import Identity, Role

USER_HEADER = "x-user-id"
ROLE_HEADER = "x-user-role"


def identity_from_headers(user_id: str | None, role: str | None) -> Identity | None:
    if not user_id or not (user_id.isascii() and user_id.isdigit()):
        return None
    try:
        parsed_role = Role((role or Role.USER.value).lower())
    except ValueError:
        parsed_role = Role.USER
    return Identity(user_id=int(user_id), role=parsed_role)


async def trusted_header_identity(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """HTTP middleware: fills request.state.identity."""
    request.state.identity = identity_from_headers(
        request.headers.get(USER_HEADER),
        request.headers.get(ROLE_HEADER),
    )
    return await call_next(request)


def current_identity(request: Request) -> Identity:
    identity = getattr(request.state, "identity", None)
    if not isinstance(identity, Identity):
        raise Errors.unauthorized()
    return identity


def admin_identity(identity: Annotated[Identity, Depends(current_identity)]) -> Identity:
    if not identity.is_admin:
        raise Errors.admin_required()
    return identity


CurrentIdentity = Annotated[Identity, Depends(current_identity)]
AdminIdentity = Annotated[Identity, Depends(admin_identity)]


__all__ = (
    "identity_from_headers",
    "trusted_header_identity",
    "current_identity",
    "admin_identity",
    "CurrentIdentity",
    "AdminIdentity",
)
