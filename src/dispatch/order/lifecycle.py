"""Order lifecycle engine — pure transition and eligibility decisions.

Nothing in this module touches a store or raises for business reasons. It
answers questions ("may this order move to X?", "may this driver take
orders?") and computes the field updates that accompany a status change.
Callers turn negative answers into domain errors.

Strict transition table:
    PENDING → CONFIRMED → PICKING → PICKED → OUT_FOR_DELIVERY → DELIVERED
    {PENDING, CONFIRMED, PICKING, PICKED, OUT_FOR_DELIVERY} → CANCELLED
    DELIVERED, CANCELLED are terminal

Administrative force mode bypasses the table. A forced move that the table
would reject is an anomaly and must be logged by the caller.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from dispatch.access import UserRole
from dispatch.driver.driver import VerificationStatus


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PICKING = "PICKING"
    PICKED = "PICKED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PICKING, OrderStatus.CANCELLED}),
    OrderStatus.PICKING: frozenset({OrderStatus.PICKED, OrderStatus.CANCELLED}),
    OrderStatus.PICKED: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),  # terminal
    OrderStatus.CANCELLED: frozenset(),  # terminal
}

TERMINAL_STATUSES = frozenset(s for s, targets in _TRANSITIONS.items() if not targets)

# Orders a driver is physically working on; used for load ranking only
ACTIVE_STATUSES = frozenset({OrderStatus.PICKING, OrderStatus.PICKED, OrderStatus.OUT_FOR_DELIVERY})

ELIGIBLE_ROLES = frozenset({UserRole.DELIVERY_DRIVER.value, UserRole.PICKUP_HELPER.value})


def _status(value) -> OrderStatus:
    return value if isinstance(value, OrderStatus) else OrderStatus(value)


def is_status_label(value) -> bool:
    """True if ``value`` names one of the order statuses."""
    return value in OrderStatus._value2member_map_


def is_payment_status_label(value) -> bool:
    return value in PaymentStatus._value2member_map_


def allowed_targets(current) -> frozenset[OrderStatus]:
    return _TRANSITIONS[_status(current)]


def can_transition(current, requested) -> bool:
    """Strict policy: is ``current → requested`` an edge of the table?"""
    return _status(requested) in _TRANSITIONS[_status(current)]


@dataclass(frozen=True)
class TransitionDecision:
    current: OrderStatus
    requested: OrderStatus
    allowed: bool
    # Set only when force mode let through a move the table rejects
    forced: bool = False


def decide_transition(current, requested, force: bool = False) -> TransitionDecision:
    current, requested = _status(current), _status(requested)
    if can_transition(current, requested):
        return TransitionDecision(current=current, requested=requested, allowed=True)
    if force:
        return TransitionDecision(current=current, requested=requested, allowed=True, forced=True)
    return TransitionDecision(current=current, requested=requested, allowed=False)


@dataclass(frozen=True)
class FieldUpdates:
    """Fields an order takes on as the result of a status change."""

    status: str
    updated_at: datetime
    delivered_at: datetime | None
    notes: str | None


def apply_side_effects(
    order,
    new_status,
    now: datetime | None = None,
    notes: str | None = None,
    cancellation_reason: str | None = None,
) -> FieldUpdates:
    """Compute the fields that accompany moving ``order`` to ``new_status``.

    ``delivered_at`` is stamped once on entry into DELIVERED and cleared when
    a forced move takes the order back out of it. Notes are only rewritten
    when supplied; a cancellation reason takes the notes field over.
    """
    new_status = _status(new_status)
    now = now or datetime.now(UTC)

    if new_status == OrderStatus.DELIVERED:
        delivered_at = order.delivered_at or now
    else:
        delivered_at = None

    updated_notes = order.notes
    if notes:
        updated_notes = notes
    if new_status == OrderStatus.CANCELLED and cancellation_reason:
        updated_notes = cancellation_reason

    return FieldUpdates(
        status=new_status.value,
        updated_at=now,
        delivered_at=delivered_at,
        notes=updated_notes,
    )


def is_assignment_eligible(driver) -> bool:
    """Role, verification and soft-delete check. Presence is not consulted."""
    return (
        driver.role in ELIGIBLE_ROLES
        and driver.verification_status == VerificationStatus.VERIFIED.value
        and driver.deleted_at is None
    )
