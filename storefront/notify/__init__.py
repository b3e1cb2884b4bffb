"""
Notify: order confirmation emails, dispatched after commit.

    await notify.dispatch(notifier, OrderConfirmation(...), timeout=10)
"""

from storefront.notify._notifier import (
    OrderConfirmation,
    Notifier,
    LoggingNotifier,
    SmtpNotifier,
    notifier_from_settings,
    dispatch,
)

__all__ = (
    "OrderConfirmation",
    "Notifier",
    "LoggingNotifier",
    "SmtpNotifier",
    "notifier_from_settings",
    "dispatch",
)
