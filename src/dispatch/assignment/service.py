"""Assignment Service — candidate listing and (re)assignment for admins.

Candidate listing is a lock-free snapshot: presence is read from the Driver
Directory on every call and the active-order count is derived from the Order
Store at the same time. Assignment goes through ``AssignDriver`` under the
order's write lock.
"""

from datetime import datetime

from protean.utils.globals import current_domain
from pydantic import BaseModel

from dispatch.access import Principal, require_admin
from dispatch.assignment.assign import AssignDriver
from dispatch.assignment.ranking import RankingPolicy, get_ranking_policy
from dispatch.driver.driver import Driver
from dispatch.order.lifecycle import is_assignment_eligible
from dispatch.order.locking import process_for_order
from dispatch.order.order import Order


class CandidateDriver(BaseModel):
    id: str
    name: str
    phone: str | None = None
    role: str
    is_online: bool
    last_online_at: datetime | None = None
    active_order_count: int = 0


class AssignmentResult(BaseModel):
    """Outcome of an assignment. ``id`` is the order id, repeated as ``order_id``."""

    id: str
    order_id: str
    driver_id: str
    previous_driver_id: str | None = None
    changed: bool
    version: int
    updated_at: datetime | None = None


def list_candidates(principal: Principal, ranking: RankingPolicy | None = None) -> list[CandidateDriver]:
    """Online, verified, eligible drivers in the order the ranking policy picks."""
    require_admin(principal)
    ranking = ranking or get_ranking_policy()

    drivers = [d for d in current_domain.repository_for(Driver).online_verified() if is_assignment_eligible(d)]
    load = current_domain.repository_for(Order).active_order_counts()

    candidates = [
        CandidateDriver(
            id=str(d.id),
            name=d.name,
            phone=d.phone,
            role=d.role,
            is_online=d.is_online,
            last_online_at=d.last_online_at,
            active_order_count=load.get(str(d.id), 0),
        )
        for d in drivers
    ]
    return ranking.rank(candidates)


def assign(
    principal: Principal,
    order_id: str,
    driver_id: str,
    expected_version: int | None = None,
) -> AssignmentResult:
    """Bind ``driver_id`` to ``order_id``. Presence is not required."""
    require_admin(principal)
    result = process_for_order(
        order_id,
        AssignDriver(
            order_id=order_id,
            driver_id=driver_id,
            expected_version=expected_version,
            assigned_by=principal.user_id,
        ),
    )
    return AssignmentResult(**result)
