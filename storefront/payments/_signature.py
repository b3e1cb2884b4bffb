"""
MoMo request signing.

Canonical string: fixed key order, `key=value` pairs joined by `&`, no
URL-encoding. Signature: lowercase hex HMAC-SHA256 with the partner secret.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Field sets
# ═══════════════════════════════════════════════════════════════════════════════

INITIATION_FIELDS: tuple[str, ...] = (
    "accessKey",
    "amount",
    "extraData",
    "ipnUrl",
    "orderId",
    "orderInfo",
    "partnerCode",
    "redirectUrl",
    "requestId",
    "requestType",
)

CONFIRMATION_FIELDS: tuple[str, ...] = (
    "accessKey",
    "amount",
    "extraData",
    "message",
    "orderId",
    "orderInfo",
    "orderType",
    "partnerCode",
    "payType",
    "requestId",
    "responseTime",
    "resultCode",
    "transId",
)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def canonical_string(fields: tuple[str, ...], values: Mapping[str, Any]) -> str:
    """Raises KeyError if a field is missing."""
    return "&".join(f"{key}={_text(values[key])}" for key in fields)


def sign(secret_key: str, message: str) -> str:
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify(
    secret_key: str,
    fields: tuple[str, ...],
    values: Mapping[str, Any],
    signature: Any,
) -> bool:
    """
    Recompute the signature over `values` and compare in constant time.

    Missing fields, a non-string or a non-ASCII signature never verify.
    """
    if not isinstance(signature, str) or not signature or not signature.isascii():
        return False
    try:
        expected = sign(secret_key, canonical_string(fields, values))
    except KeyError:
        return False
    return hmac.compare_digest(expected, signature.lower())


__all__ = (
    "INITIATION_FIELDS",
    "CONFIRMATION_FIELDS",
    "canonical_string",
    "sign",
    "verify",
)
