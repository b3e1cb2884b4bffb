"""Tests for the inventory ledger."""

import pytest

from helpers import expect_error, expect_ok
from storefront import inventory

pytestmark = pytest.mark.anyio


class TestReserveStock:
    async def test_decrements_inside_transaction(self, seed, session_factory):
        variant_id = await seed.variant(price=150_000, stock=5, name="Denim jacket")

        async with session_factory() as session, session.begin():
            reservation = expect_ok(await inventory.reserve_stock(session, variant_id, 2))

        assert reservation.variant_id == variant_id
        assert reservation.product_name == "Denim jacket"
        assert reservation.unit_price == 150_000
        assert reservation.subtotal == 300_000
        assert await seed.stock_of(variant_id) == 3

    async def test_insufficient_stock_changes_nothing(self, seed, session_factory):
        variant_id = await seed.variant(stock=1, name="Wool scarf")

        async with session_factory() as session, session.begin():
            error = expect_error(
                await inventory.reserve_stock(session, variant_id, 2),
                "stock_exceeded",
            )

        assert error.detail == "Wool scarf"
        assert await seed.stock_of(variant_id) == 1

    async def test_exact_stock_is_allowed(self, seed, session_factory):
        variant_id = await seed.variant(stock=2)

        async with session_factory() as session, session.begin():
            expect_ok(await inventory.reserve_stock(session, variant_id, 2))

        assert await seed.stock_of(variant_id) == 0

    async def test_missing_variant(self, session_factory):
        async with session_factory() as session, session.begin():
            expect_error(await inventory.reserve_stock(session, 999, 1), "variant_not_found")

    async def test_inactive_product(self, seed, session_factory):
        variant_id = await seed.variant(stock=5, is_active=False)

        async with session_factory() as session, session.begin():
            expect_error(await inventory.reserve_stock(session, variant_id, 1), "variant_not_found")

        assert await seed.stock_of(variant_id) == 5

    async def test_non_positive_quantity(self, seed, session_factory):
        variant_id = await seed.variant(stock=5)

        async with session_factory() as session, session.begin():
            expect_error(await inventory.reserve_stock(session, variant_id, 0), "invalid_quantity")

    async def test_rolled_back_transaction_restores_stock(self, seed, session_factory):
        variant_id = await seed.variant(stock=4)

        with pytest.raises(RuntimeError):
            async with session_factory() as session, session.begin():
                await inventory.reserve_stock(session, variant_id, 3)
                raise RuntimeError("abort")

        assert await seed.stock_of(variant_id) == 4


class TestReleaseStock:
    async def test_returns_quantity(self, seed, session_factory):
        variant_id = await seed.variant(stock=1)

        async with session_factory() as session, session.begin():
            await inventory.release_stock(session, variant_id, 3)

        assert await seed.stock_of(variant_id) == 4
