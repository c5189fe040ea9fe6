"""Driver aggregate (CQRS) — the fulfillment profile of a delivery agent.

A driver is referenced by orders, it never owns them. Presence (``is_online``)
is flipped by a separate presence collaborator and is advisory: it ranks and
filters candidates but never blocks a direct administrative assignment.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change
from protean.fields import Boolean, DateTime, Identifier, String

from dispatch.access import UserRole
from dispatch.domain import dispatch
from dispatch.driver.events import (
    DriverRegistered,
    DriverRemoved,
    DriverVerificationChanged,
    DriverWentOffline,
    DriverWentOnline,
)
from dispatch.exceptions import Conflict, MalformedInput, NotFound


class VerificationStatus(Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


@dispatch.aggregate
class Driver:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    phone = String(max_length=20)
    role = String(required=True, choices=UserRole)
    verification_status = String(
        choices=VerificationStatus,
        default=VerificationStatus.PENDING.value,
    )
    is_online = Boolean(default=False)
    last_online_at = DateTime()
    deleted_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, user_id: str, name: str, role: str, phone: str | None = None):
        """Register a new fulfillment profile, offline and awaiting verification."""
        now = datetime.now(UTC)
        driver = cls(
            user_id=user_id,
            name=name,
            phone=phone,
            role=role,
            verification_status=VerificationStatus.PENDING.value,
            is_online=False,
            created_at=now,
            updated_at=now,
        )
        driver.raise_(
            DriverRegistered(
                driver_id=str(driver.id),
                user_id=user_id,
                name=name,
                role=role,
                registered_at=now,
            )
        )
        return driver

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def _assert_live(self) -> None:
        if self.is_deleted:
            raise NotFound("Driver not found", driver_id=str(self.id))

    def set_verification(self, status: str) -> None:
        self._assert_live()
        if status not in VerificationStatus._value2member_map_:
            raise MalformedInput(f"Unknown verification status: {status}", driver_id=str(self.id))
        if status == self.verification_status:
            return

        now = datetime.now(UTC)
        previous = self.verification_status
        with atomic_change(self):
            self.verification_status = status
            self.updated_at = now
        self.raise_(
            DriverVerificationChanged(
                driver_id=str(self.id),
                previous_status=previous,
                new_status=status,
                changed_at=now,
            )
        )

    def go_online(self) -> None:
        self._assert_live()
        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_online = True
            self.last_online_at = now
            self.updated_at = now
        self.raise_(DriverWentOnline(driver_id=str(self.id), occurred_at=now))

    def go_offline(self) -> None:
        self._assert_live()
        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_online = False
            self.updated_at = now
        self.raise_(DriverWentOffline(driver_id=str(self.id), occurred_at=now))

    def remove(self) -> None:
        """Soft-delete the profile; it stays in storage for audit."""
        if self.is_deleted:
            raise Conflict("Driver already removed", driver_id=str(self.id))

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_online = False
            self.deleted_at = now
            self.updated_at = now
        self.raise_(DriverRemoved(driver_id=str(self.id), removed_at=now))
