"""Pytest fixtures for storefront tests."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from pydantic import SecretStr
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront import db
from storefront.config import MomoSettings, Settings
from storefront.db import (
    AddressTable,
    OrderTable,
    PaymentTable,
    ProductTable,
    UserTable,
    VariantTable,
)
from storefront.http import Services
from storefront.notify import LoggingNotifier
from storefront.payments import MomoGateway, PaymentInitiation


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ═══════════════════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        momo=MomoSettings(
            partner_code="MOMOTEST",
            access_key="test-access",
            secret_key=SecretStr("test-secret"),
            endpoint="https://momo.test/v2/gateway/api/create",
            redirect_url="https://shop.test/return",
            ipn_url="https://shop.test/api/payments/success",
        ),
    )


@pytest.fixture
async def session_factory(settings):
    factory, engine = await db.create_database(settings.database_url)
    yield factory
    await engine.dispose()


@dataclass
class Seed:
    """Direct table access for arranging and inspecting state."""

    session_factory: async_sessionmaker[AsyncSession]

    async def user(self, email: str = "buyer@example.com", role: str = "user") -> int:
        async with self.session_factory() as session, session.begin():
            row = UserTable(email=email, name=email.split("@")[0], role=role)
            session.add(row)
            await session.flush()
            return row.id

    async def address(self, user_id: int) -> int:
        async with self.session_factory() as session, session.begin():
            row = AddressTable(
                user_id=user_id,
                full_name="Nguyen Van A",
                phone="0900000000",
                address_line="1 Le Loi",
                city="Ho Chi Minh",
                state="District 1",
                country="VN",
                postal_code="700000",
            )
            session.add(row)
            await session.flush()
            return row.id

    async def variant(
        self,
        *,
        price: int = 200_000,
        stock: int = 10,
        name: str = "Linen shirt",
        is_active: bool = True,
    ) -> int:
        async with self.session_factory() as session, session.begin():
            product = ProductTable(name=name, price=price, is_active=is_active)
            session.add(product)
            await session.flush()
            variant = VariantTable(product_id=product.id, size="M", color="white", stock=stock)
            session.add(variant)
            await session.flush()
            return variant.id

    async def stock_of(self, variant_id: int) -> int:
        async with self.session_factory() as session:
            stmt = select(VariantTable.stock).where(VariantTable.id == variant_id)
            return (await session.execute(stmt)).scalar_one()

    async def set_stock(self, variant_id: int, stock: int) -> None:
        async with self.session_factory() as session, session.begin():
            await session.execute(
                update(VariantTable).where(VariantTable.id == variant_id).values(stock=stock)
            )

    async def set_price(self, variant_id: int, price: int) -> None:
        async with self.session_factory() as session, session.begin():
            variant = await session.get(VariantTable, variant_id)
            assert variant is not None
            await session.execute(
                update(ProductTable).where(ProductTable.id == variant.product_id).values(price=price)
            )

    async def order_count(self) -> int:
        async with self.session_factory() as session:
            return (await session.execute(select(func.count()).select_from(OrderTable))).scalar_one()

    async def order_status(self, order_id: int) -> str:
        async with self.session_factory() as session:
            stmt = select(OrderTable.status).where(OrderTable.id == order_id)
            return (await session.execute(stmt)).scalar_one()

    async def set_order_status(self, order_id: int, status: str) -> None:
        async with self.session_factory() as session, session.begin():
            await session.execute(
                update(OrderTable).where(OrderTable.id == order_id).values(status=status)
            )

    async def payments(self) -> list[PaymentTable]:
        async with self.session_factory() as session:
            return list((await session.execute(select(PaymentTable))).scalars().all())


@pytest.fixture
def seed(session_factory):
    return Seed(session_factory)


# ═══════════════════════════════════════════════════════════════════════════════
# Wallet provider
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class FakeMomo:
    """Stands in for the MoMo create endpoint."""

    result_code: int = 0
    transport_failures: int = 0
    raw_body: bytes | None = None
    requests: list[dict[str, Any]] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if self.transport_failures > 0:
            self.transport_failures -= 1
            raise httpx.ConnectError("provider unreachable", request=request)
        if self.raw_body is not None:
            return httpx.Response(200, content=self.raw_body)
        return httpx.Response(
            200,
            json={
                "partnerCode": payload["partnerCode"],
                "orderId": payload["orderId"],
                "requestId": payload["requestId"],
                "amount": payload["amount"],
                "responseTime": 1_700_000_000_000,
                "message": "Successful." if self.result_code == 0 else "Bad request",
                "resultCode": self.result_code,
                "payUrl": f"https://momo.test/pay/{payload['requestId']}",
            },
        )


@pytest.fixture
def fake_momo():
    return FakeMomo()


@pytest.fixture
async def http_client(fake_momo):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_momo.handler)) as client:
        yield client


@pytest.fixture
def gateway(settings, http_client):
    return MomoGateway(settings.momo, client=http_client)


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def services(session_factory, settings, notifier, http_client):
    return Services.build(session_factory, settings, notifier=notifier, http_client=http_client)


@pytest.fixture
def make_webhook(gateway) -> Callable[..., dict[str, Any]]:
    """Build a provider notification for an initiated payment, signed like MoMo signs it."""

    def build(
        initiation: PaymentInitiation,
        *,
        result_code: int = 0,
        amount: int | None = None,
        trans_id: str = "4088878653",
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "partnerCode": "MOMOTEST",
            "orderId": initiation.request_id,
            "requestId": initiation.request_id,
            "amount": initiation.amount if amount is None else amount,
            "orderInfo": f"Payment for order #{initiation.order_id}",
            "orderType": "momo_wallet",
            "transId": trans_id,
            "resultCode": result_code,
            "message": "Successful." if result_code == 0 else "Transaction denied",
            "payType": "qr",
            "responseTime": 1_700_000_000_000,
            "extraData": "",
        }
        payload["signature"] = gateway.sign_confirmation(payload)
        return payload

    return build
