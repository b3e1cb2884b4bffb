"""
Saga: multi-transaction operations with compensation.

    saga = Saga("checkout-and-pay")
    match await saga.stage("place-order", place(), undo=revert):
        case Error(e):
            return Error(e)
        case Ok(order):
            paid = await saga.stage("initiate-payment", pay(order))
    match paid:
        case Error(e):
            rollback = await saga.rollback()
"""

from storefront.saga._types import Undo, Compensation, Rollback
from storefront.saga._saga import Saga

__all__ = (
    "Undo",
    "Compensation",
    "Rollback",
    "Saga",
)
