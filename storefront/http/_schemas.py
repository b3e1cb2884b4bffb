"""
Wire models: camelCase JSON in and out.

Requests convert to domain values with `to_domain()`, responses are built
from domain views with `from_domain()`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront._types import OrderStatus, PaymentMethod, PaymentStatus
from storefront.cart import Cart, CartLine
from storefront.checkout import AddressView, CheckoutPayment, OrderLine, OrderPage, PlacedOrder
from storefront.payments import PaymentInitiation, PaymentView, WebhookAck


class Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class AddCartItemIn(Wire):
    variant_id: int
    quantity: int = 1


class UpdateCartItemIn(Wire):
    quantity: int


class SelectCartItemsIn(Wire):
    item_ids: list[int] = Field(min_length=1)
    is_selected: bool = True


class CreateOrderIn(Wire):
    address_id: int
    payment_method: PaymentMethod = PaymentMethod.COD


class BuyNowIn(Wire):
    variant_id: int
    quantity: int = 1
    address_id: int
    payment_method: PaymentMethod = PaymentMethod.COD


class CheckoutIn(Wire):
    address_id: int


class UpdateOrderStatusIn(Wire):
    status: OrderStatus

    def to_domain(self) -> OrderStatus:
        return self.status


class InitiatePaymentIn(Wire):
    order_id: int


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartLineOut(Wire):
    id: int
    variant_id: int
    product_id: int
    product_name: str
    size: str | None
    color: str | None
    unit_price: int
    quantity: int
    is_selected: bool
    stock: int

    @classmethod
    def from_domain(cls, line: CartLine) -> CartLineOut:
        return cls(
            id=line.id,
            variant_id=line.variant_id,
            product_id=line.product_id,
            product_name=line.product_name,
            size=line.size,
            color=line.color,
            unit_price=line.unit_price,
            quantity=line.quantity,
            is_selected=line.is_selected,
            stock=line.stock,
        )


class CartOut(Wire):
    id: int
    items: list[CartLineOut]
    selected_total: int

    @classmethod
    def from_domain(cls, cart: Cart) -> CartOut:
        return cls(
            id=cart.id,
            items=[CartLineOut.from_domain(line) for line in cart.lines],
            selected_total=cart.selected_total,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class AddressOut(Wire):
    id: int
    full_name: str
    phone: str
    address_line: str
    city: str
    state: str
    country: str
    postal_code: str

    @classmethod
    def from_domain(cls, address: AddressView) -> AddressOut:
        return cls(
            id=address.id,
            full_name=address.full_name,
            phone=address.phone,
            address_line=address.address_line,
            city=address.city,
            state=address.state,
            country=address.country,
            postal_code=address.postal_code,
        )


class OrderLineOut(Wire):
    variant_id: int
    product_id: int
    product_name: str
    size: str | None
    color: str | None
    quantity: int
    unit_price: int
    subtotal: int

    @classmethod
    def from_domain(cls, line: OrderLine) -> OrderLineOut:
        return cls(
            variant_id=line.variant_id,
            product_id=line.product_id,
            product_name=line.product_name,
            size=line.size,
            color=line.color,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )


class OrderOut(Wire):
    id: int
    user_id: int
    status: OrderStatus
    payment_method: PaymentMethod
    total: int
    shipping_fee: int
    amount_due: int
    address: AddressOut
    items: list[OrderLineOut]
    created_at: datetime

    @classmethod
    def from_domain(cls, order: PlacedOrder) -> OrderOut:
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            payment_method=order.payment_method,
            total=order.total,
            shipping_fee=order.shipping_fee,
            amount_due=order.amount_due,
            address=AddressOut.from_domain(order.address),
            items=[OrderLineOut.from_domain(line) for line in order.lines],
            created_at=order.created_at,
        )


class OrderPageOut(Wire):
    orders: list[OrderOut]
    page: int
    limit: int
    total_count: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: OrderPage) -> OrderPageOut:
        return cls(
            orders=[OrderOut.from_domain(o) for o in page.orders],
            page=page.page,
            limit=page.limit,
            total_count=page.total_count,
            total_pages=page.total_pages,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Payments
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentInitiationOut(Wire):
    payment_id: int
    order_id: int
    request_id: str
    amount: int
    approval_url: str

    @classmethod
    def from_domain(cls, initiation: PaymentInitiation) -> PaymentInitiationOut:
        return cls(
            payment_id=initiation.payment_id,
            order_id=initiation.order_id,
            request_id=initiation.request_id,
            amount=initiation.amount,
            approval_url=initiation.approval_url,
        )


class CheckoutOut(Wire):
    order: OrderOut
    payment: PaymentInitiationOut

    @classmethod
    def from_domain(cls, result: CheckoutPayment) -> CheckoutOut:
        return cls(
            order=OrderOut.from_domain(result.order),
            payment=PaymentInitiationOut.from_domain(result.payment),
        )


class PaymentOut(Wire):
    id: int
    order_id: int
    payment_method: PaymentMethod
    amount: int
    status: PaymentStatus
    request_id: str | None
    transaction_id: str | None

    @classmethod
    def from_domain(cls, payment: PaymentView) -> PaymentOut:
        return cls(
            id=payment.id,
            order_id=payment.order_id,
            payment_method=payment.method,
            amount=payment.amount,
            status=payment.status,
            request_id=payment.request_id,
            transaction_id=payment.provider_transaction_id,
        )


class WebhookAckOut(Wire):
    order_id: int
    payment_id: int
    status: PaymentStatus
    duplicate: bool

    @classmethod
    def from_domain(cls, ack: WebhookAck) -> WebhookAckOut:
        return cls(
            order_id=ack.order_id,
            payment_id=ack.payment_id,
            status=ack.status,
            duplicate=ack.duplicate,
        )


class CancelPaymentOut(Wire):
    order_id: int
    status: PaymentStatus | None

    @classmethod
    def from_domain(cls, order_id: int, payment: PaymentView | None) -> CancelPaymentOut:
        return cls(order_id=order_id, status=payment.status if payment else None)


class ErrorOut(Wire):
    code: str
    message: str
    detail: str | None = None
