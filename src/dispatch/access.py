"""Caller identity and authorization guards.

The identity collaborator authenticates the caller and hands over a verified
principal. Every administrative operation receives that principal explicitly
and checks it before any store is read.
"""

from dataclasses import dataclass
from enum import Enum

from dispatch.exceptions import Forbidden


class UserRole(Enum):
    CUSTOMER = "CUSTOMER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"
    DELIVERY_DRIVER = "DELIVERY_DRIVER"
    PICKUP_HELPER = "PICKUP_HELPER"


@dataclass(frozen=True)
class Principal:
    """An authenticated caller."""

    user_id: str
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def require_admin(principal: Principal | None) -> Principal:
    """Reject any caller that is not a verified admin."""
    if principal is None or not principal.is_admin:
        raise Forbidden("Admin access required.")
    return principal


def require_acting_driver(
    principal: Principal | None,
    user_id: str,
    role: str,
    allow_admin: bool = False,
) -> Principal:
    """Reject any caller that is not the driver owning ``user_id`` in ``role``.

    Admins pass only where ``allow_admin`` is set; field flows never set it,
    so nobody picks or delivers on a driver's behalf.
    """
    if principal is not None and allow_admin and principal.is_admin:
        return principal
    if principal is None or principal.user_id != str(user_id) or principal.role != role:
        raise Forbidden("Drivers may only act on their own behalf.")
    return principal
