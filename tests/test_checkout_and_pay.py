"""Tests for placing a wallet order and initiating its payment in one call."""

import pytest

from helpers import expect_error, expect_ok
from storefront import Identity, OrderStatus, PaymentMethod

pytestmark = pytest.mark.anyio


@pytest.fixture
async def shopper(seed, services):
    user_id = await seed.user("shopper@example.com")
    identity = Identity(user_id=user_id)
    address_id = await seed.address(user_id)
    variant_id = await seed.variant(price=200_000, stock=10)
    expect_ok(await services.carts.add_to_cart(user_id, variant_id, 2))
    return identity, address_id, variant_id


class TestCheckoutAndPay:
    async def test_places_order_and_initiates_payment(self, seed, services, notifier, shopper):
        identity, address_id, variant_id = shopper

        result = expect_ok(
            await services.checkout.checkout_and_pay(identity, address_id, services.payments)
        )

        assert result.order.payment_method is PaymentMethod.MOMO
        assert result.order.status is OrderStatus.PENDING
        assert result.payment.order_id == result.order.id
        assert result.payment.amount == 430_000
        assert await seed.stock_of(variant_id) == 8
        assert [m.order_id for m in notifier.sent] == [result.order.id]

    async def test_gateway_failure_reverts_order(self, seed, services, fake_momo, notifier, shopper):
        identity, address_id, variant_id = shopper
        fake_momo.result_code = 99

        expect_error(
            await services.checkout.checkout_and_pay(identity, address_id, services.payments),
            "momo_error",
        )

        assert await seed.stock_of(variant_id) == 10
        page = expect_ok(await services.checkout.list_user_orders(identity))
        assert [o.status for o in page.orders] == [OrderStatus.CANCELLED]
        cart = expect_ok(await services.carts.get_cart(identity.user_id))
        assert [(line.variant_id, line.quantity, line.is_selected) for line in cart.lines] == [
            (variant_id, 2, True)
        ]
        assert await seed.payments() == []
        assert notifier.sent == []

    async def test_checkout_failure_leaves_nothing_to_revert(self, seed, services, fake_momo):
        user_id = await seed.user("empty@example.com")
        identity = Identity(user_id=user_id)
        address_id = await seed.address(user_id)

        expect_error(
            await services.checkout.checkout_and_pay(identity, address_id, services.payments),
            "cart_not_found",
        )
        assert fake_momo.requests == []
        assert await seed.order_count() == 0
