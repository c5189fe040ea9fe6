"""Dispatch bounded context — Order Lifecycle and Driver Assignment.

Tracks marketplace orders through their operational states, enforces the
legal status transitions, and binds orders to verified delivery drivers and
pickup helpers. Uses CQRS: aggregates are persisted as current state and
read-side views are computed from the stores on demand.
"""

from protean.domain import Domain

from dispatch.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

dispatch = Domain(name="dispatch")
