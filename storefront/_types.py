"""
Core types for storefront.

Re-exports from kungfu + identity and money aliases shared by every service.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = int
"""Amount in VND. The currency has no minor unit and the wallet takes integers."""

# ═══════════════════════════════════════════════════════════════════════════════
# Statuses
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    """
    Lifecycle:
        PENDING → COMPLETED (payment confirmed / admin)
                → CANCELLED (user / admin)
    Both targets are terminal.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class PaymentStatus(Enum):
    """
    Lifecycle:
        PENDING → COMPLETED (verified webhook)
                → FAILED (cancel / provider failure)
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(Enum):
    COD = "cod"
    MOMO = "momo"


# ═══════════════════════════════════════════════════════════════════════════════
# Identity: supplied by the authentication layer, trusted as-is
# ═══════════════════════════════════════════════════════════════════════════════


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class Identity:
    """Verified caller identity."""

    user_id: int
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Money",
    # Statuses
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    # Identity
    "Role",
    "Identity",
)
