"""
MoMo gateway adapter: signed capture-wallet requests over httpx.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from storefront._errors import Errors, ShopError
from storefront._types import Result, Ok, Error, Money
from storefront.config import MomoSettings
from storefront.payments._signature import (
    CONFIRMATION_FIELDS,
    INITIATION_FIELDS,
    canonical_string,
    sign,
    verify,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    request_id: str
    order_id: str
    amount: Money
    order_info: str
    extra_data: str = ""


@dataclass(frozen=True, slots=True)
class PaymentLink:
    request_id: str
    pay_url: str


class MomoGateway:
    """
    Builds and submits signed payment requests, verifies webhook signatures.

    Credentials come from MomoSettings through the constructor. Pass `client`
    to share a connection pool (or to inject a mock transport in tests).
    """

    def __init__(self, settings: MomoSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def _secret(self) -> str:
        return self._settings.secret_key.get_secret_value()

    def new_request(self, order_id: int, amount: Money) -> PaymentRequest:
        # The provider orderId must be unique per attempt as well, so it reuses requestId.
        request_id = f"{self._settings.partner_code}{uuid.uuid4().hex}"
        return PaymentRequest(
            request_id=request_id,
            order_id=request_id,
            amount=amount,
            order_info=f"Payment for order #{order_id}",
        )

    def build_payload(self, request: PaymentRequest) -> dict[str, Any]:
        s = self._settings
        fields: dict[str, Any] = {
            "accessKey": s.access_key,
            "amount": request.amount,
            "extraData": request.extra_data,
            "ipnUrl": s.ipn_url,
            "orderId": request.order_id,
            "orderInfo": request.order_info,
            "partnerCode": s.partner_code,
            "redirectUrl": s.redirect_url,
            "requestId": request.request_id,
            "requestType": s.request_type,
        }
        signature = sign(self._secret, canonical_string(INITIATION_FIELDS, fields))
        return {**fields, "signature": signature, "lang": s.lang}

    async def create_payment(self, request: PaymentRequest) -> Result[PaymentLink, ShopError]:
        """
        POST the signed request and extract payUrl.

        Transport failures are retried up to `max_attempts` with the same
        requestId. Any other failure is returned immediately as momo_error.
        """
        payload = self.build_payload(request)
        last_error: httpx.TransportError | None = None

        for attempt in range(1, self._settings.max_attempts + 1):
            try:
                response = await self._post(payload)
                break
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "momo request %s attempt %s/%s failed: %r",
                    request.request_id,
                    attempt,
                    self._settings.max_attempts,
                    e,
                )
        else:
            return Error(Errors.momo_error(f"transport error: {last_error!r}"))

        try:
            body = response.json()
        except ValueError:
            logger.error("momo returned non-JSON body (status %s)", response.status_code)
            return Error(Errors.momo_error(f"invalid response (status {response.status_code})"))

        if not isinstance(body, dict):
            return Error(Errors.momo_error("invalid response body"))

        result_code = body.get("resultCode")
        pay_url = body.get("payUrl")
        if result_code != 0 or not isinstance(pay_url, str) or not pay_url:
            logger.warning(
                "momo rejected request %s: resultCode=%s message=%s",
                request.request_id,
                result_code,
                body.get("message"),
            )
            return Error(Errors.momo_error(f"resultCode={result_code}: {body.get('message')}"))

        return Ok(PaymentLink(request_id=request.request_id, pay_url=pay_url))

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        timeout = self._settings.timeout_seconds
        if self._client is not None:
            return await self._client.post(self._settings.endpoint, json=payload, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(self._settings.endpoint, json=payload)

    def verify_confirmation(self, payload: Mapping[str, Any]) -> bool:
        """Check a webhook signature. accessKey is taken from settings, not the payload."""
        values = {**payload, "accessKey": self._settings.access_key}
        return verify(self._secret, CONFIRMATION_FIELDS, values, payload.get("signature"))

    def sign_confirmation(self, payload: Mapping[str, Any]) -> str:
        """Signature the provider would attach to `payload` (simulators, tests)."""
        values = {**payload, "accessKey": self._settings.access_key}
        return sign(self._secret, canonical_string(CONFIRMATION_FIELDS, values))


__all__ = (
    "PaymentRequest",
    "PaymentLink",
    "MomoGateway",
)
