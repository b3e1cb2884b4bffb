"""
Checkout read models: immutable views built inside the transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from storefront._types import Money, OrderStatus, PaymentMethod
from storefront.db import AddressTable, OrderLineTable, OrderTable


@dataclass(frozen=True, slots=True)
class AddressView:
    id: int
    full_name: str
    phone: str
    address_line: str
    city: str
    state: str
    country: str
    postal_code: str

    @classmethod
    def from_row(cls, row: AddressTable) -> AddressView:
        return cls(
            id=row.id,
            full_name=row.full_name,
            phone=row.phone,
            address_line=row.address_line,
            city=row.city,
            state=row.state,
            country=row.country,
            postal_code=row.postal_code,
        )


@dataclass(frozen=True, slots=True)
class OrderLine:
    """One line of a placed order; unit_price is the price paid, not the live price."""

    variant_id: int
    product_id: int
    product_name: str
    size: str | None
    color: str | None
    quantity: int
    unit_price: Money

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity

    @classmethod
    def from_row(cls, row: OrderLineTable) -> OrderLine:
        variant = row.variant
        return cls(
            variant_id=variant.id,
            product_id=variant.product.id,
            product_name=variant.product.name,
            size=variant.size,
            color=variant.color,
            quantity=row.quantity,
            unit_price=row.unit_price,
        )


@dataclass(frozen=True, slots=True)
class PlacedOrder:
    id: int
    user_id: int
    status: OrderStatus
    payment_method: PaymentMethod
    total: Money
    shipping_fee: Money
    address: AddressView
    lines: tuple[OrderLine, ...]
    created_at: datetime

    @property
    def amount_due(self) -> Money:
        return self.total + self.shipping_fee

    @classmethod
    def from_row(cls, row: OrderTable) -> PlacedOrder:
        return cls(
            id=row.id,
            user_id=row.user_id,
            status=OrderStatus(row.status),
            payment_method=PaymentMethod(row.payment_method),
            total=row.total,
            shipping_fee=row.shipping_fee,
            address=AddressView.from_row(row.address),
            lines=tuple(OrderLine.from_row(line) for line in row.lines),
            created_at=row.created_at,
        )


@dataclass(frozen=True, slots=True)
class OrderPage:
    orders: tuple[PlacedOrder, ...]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.limit) if self.limit else 0


__all__ = (
    "AddressView",
    "OrderLine",
    "PlacedOrder",
    "OrderPage",
)
