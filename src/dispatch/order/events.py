"""Order domain events — immutable facts about order state changes.

Events carry enough data for an external audit log to reconstruct who
changed what. The core itself keeps no assignment or status history.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from dispatch.domain import dispatch


@dispatch.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@dispatch.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status.

    ``forced`` marks administrative overrides that bypassed the transition
    table.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    forced = Boolean(default=False)
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@dispatch.event(part_of="Order")
class DriverAssigned:
    """The order's driver edge was written or rewritten."""

    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    previous_driver_id = Identifier()
    assigned_at = DateTime(required=True)


@dispatch.event(part_of="Order")
class OrderDeleted:
    """The order was soft-deleted and hidden from normal queries."""

    __version__ = 1

    order_id = Identifier(required=True)
    deleted_at = DateTime(required=True)
