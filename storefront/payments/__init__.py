"""
Payments: MoMo wallet sessions.

    gateway = MomoGateway(settings.momo)
    payments = PaymentService(session_factory, gateway)

    match await payments.initiate_payment(identity, order_id):
        case Ok(initiation):
            redirect(initiation.approval_url)
        case Error(e):
            print(e.code)  # order_not_found_or_invalid, order_already_paid, momo_error

    # Provider webhook
    await payments.confirm_payment(payload)
"""

from storefront.payments._signature import (
    INITIATION_FIELDS,
    CONFIRMATION_FIELDS,
    canonical_string,
    sign,
    verify,
)
from storefront.payments._gateway import PaymentRequest, PaymentLink, MomoGateway
from storefront.payments._types import PaymentView, PaymentInitiation, WebhookAck
from storefront.payments._service import PaymentService

__all__ = (
    "INITIATION_FIELDS",
    "CONFIRMATION_FIELDS",
    "canonical_string",
    "sign",
    "verify",
    "PaymentRequest",
    "PaymentLink",
    "MomoGateway",
    "PaymentView",
    "PaymentInitiation",
    "WebhookAck",
    "PaymentService",
)
