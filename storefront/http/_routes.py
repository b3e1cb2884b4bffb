"""
Routers: thin: parse, call a service, unwrap the Result, encode.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from storefront._errors import ShopError
from storefront._types import Result, Ok, Error, OrderStatus
from storefront.http._auth import AdminIdentity, CurrentIdentity
from storefront.http._schemas import (
    AddCartItemIn,
    BuyNowIn,
    CancelPaymentOut,
    CartOut,
    CheckoutIn,
    CheckoutOut,
    CreateOrderIn,
    InitiatePaymentIn,
    OrderOut,
    OrderPageOut,
    PaymentInitiationOut,
    PaymentOut,
    SelectCartItemsIn,
    UpdateCartItemIn,
    UpdateOrderStatusIn,
    WebhookAckOut,
)
from storefront.http._services import Services


def unwrap[T](result: Result[T, ShopError]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise e


def get_services(request: Request) -> Services:
    services: Services = request.app.state.services
    return services


ServicesDep = Annotated[Services, Depends(get_services)]
PageQuery = Annotated[int, Query(ge=1)]
LimitQuery = Annotated[int, Query(ge=1, le=100)]


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════

cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(identity: CurrentIdentity, services: ServicesDep) -> CartOut:
    return CartOut.from_domain(unwrap(await services.carts.get_cart(identity.user_id)))


@cart_router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    req: AddCartItemIn,
    identity: CurrentIdentity,
    services: ServicesDep,
) -> CartOut:
    result = await services.carts.add_to_cart(identity.user_id, req.variant_id, req.quantity)
    return CartOut.from_domain(unwrap(result))


@cart_router.put("/items/{line_id}")
async def update_cart_item(
    line_id: int,
    req: UpdateCartItemIn,
    identity: CurrentIdentity,
    services: ServicesDep,
) -> CartOut:
    result = await services.carts.update_line(identity.user_id, line_id, req.quantity)
    return CartOut.from_domain(unwrap(result))


@cart_router.delete("/items/{line_id}")
async def remove_cart_item(line_id: int, identity: CurrentIdentity, services: ServicesDep) -> CartOut:
    return CartOut.from_domain(unwrap(await services.carts.remove_line(identity.user_id, line_id)))


@cart_router.put("/select")
async def select_cart_items(
    req: SelectCartItemsIn,
    identity: CurrentIdentity,
    services: ServicesDep,
) -> CartOut:
    result = await services.carts.select_lines(identity.user_id, req.item_ids, req.is_selected)
    return CartOut.from_domain(unwrap(result))


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════

orders_router = APIRouter(prefix="/api/orders", tags=["orders"])


@orders_router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(req: CreateOrderIn, identity: CurrentIdentity, services: ServicesDep) -> OrderOut:
    result = await services.checkout.create_order_from_cart(
        identity, req.address_id, req.payment_method
    )
    return OrderOut.from_domain(unwrap(result))


@orders_router.post("/buy-now", status_code=status.HTTP_201_CREATED)
async def buy_now(req: BuyNowIn, identity: CurrentIdentity, services: ServicesDep) -> OrderOut:
    result = await services.checkout.buy_now(
        identity,
        variant_id=req.variant_id,
        quantity=req.quantity,
        address_id=req.address_id,
        payment_method=req.payment_method,
    )
    return OrderOut.from_domain(unwrap(result))


@orders_router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout_and_pay(req: CheckoutIn, identity: CurrentIdentity, services: ServicesDep) -> CheckoutOut:
    result = await services.checkout.checkout_and_pay(identity, req.address_id, services.payments)
    return CheckoutOut.from_domain(unwrap(result))


@orders_router.get("/my-orders")
async def my_orders(
    identity: CurrentIdentity,
    services: ServicesDep,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> OrderPageOut:
    result = await services.checkout.list_user_orders(identity, page=page, limit=limit)
    return OrderPageOut.from_domain(unwrap(result))


@orders_router.get("")
async def list_orders(
    identity: AdminIdentity,
    services: ServicesDep,
    status_filter: Annotated[OrderStatus | None, Query(alias="status")] = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> OrderPageOut:
    result = await services.checkout.list_orders(
        identity,
        status=status_filter,
        user_id=user_id,
        page=page,
        limit=limit,
    )
    return OrderPageOut.from_domain(unwrap(result))


@orders_router.get("/{order_id}")
async def get_order(order_id: int, identity: CurrentIdentity, services: ServicesDep) -> OrderOut:
    return OrderOut.from_domain(unwrap(await services.checkout.get_order(identity, order_id)))


@orders_router.put("/{order_id}")
async def update_order_status(
    order_id: int,
    req: UpdateOrderStatusIn,
    identity: AdminIdentity,
    services: ServicesDep,
) -> OrderOut:
    result = await services.checkout.update_order_status(identity, order_id, req.to_domain())
    return OrderOut.from_domain(unwrap(result))


@orders_router.put("/{order_id}/cancel")
async def cancel_order(order_id: int, identity: CurrentIdentity, services: ServicesDep) -> OrderOut:
    return OrderOut.from_domain(unwrap(await services.checkout.cancel_order(identity, order_id)))


# ═══════════════════════════════════════════════════════════════════════════════
# Payments
# ═══════════════════════════════════════════════════════════════════════════════

payments_router = APIRouter(prefix="/api/payments", tags=["payments"])


@payments_router.post("")
async def initiate_payment(
    req: InitiatePaymentIn,
    identity: CurrentIdentity,
    services: ServicesDep,
) -> PaymentInitiationOut:
    result = await services.payments.initiate_payment(identity, req.order_id)
    return PaymentInitiationOut.from_domain(unwrap(result))


@payments_router.post("/success")
async def payment_webhook(
    payload: Annotated[dict[str, Any], Body()],
    services: ServicesDep,
) -> WebhookAckOut:
    """Provider notification; authenticated by its signature, not by identity."""
    return WebhookAckOut.from_domain(unwrap(await services.payments.confirm_payment(payload)))


@payments_router.api_route("/cancel", methods=["GET", "POST"])
async def cancel_payment(
    order_id: Annotated[int, Query(alias="orderId")],
    services: ServicesDep,
) -> CancelPaymentOut:
    result = await services.payments.cancel_payment(order_id)
    return CancelPaymentOut.from_domain(order_id, unwrap(result))


@payments_router.get("/{order_id}")
async def get_payment(order_id: int, identity: CurrentIdentity, services: ServicesDep) -> PaymentOut:
    return PaymentOut.from_domain(unwrap(await services.payments.get_payment(identity, order_id)))


__all__ = (
    "cart_router",
    "orders_router",
    "payments_router",
    "unwrap",
)
