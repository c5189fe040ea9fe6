"""Administrative status update — command and handler.

The default policy is the strict transition table. ``force`` lets an admin
set any status for operational correction; such overrides are flagged on the
emitted event and logged as anomalies.
"""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.order.order import Order
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to a new status."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=30)
    notes = Text()
    cancellation_reason = String(max_length=500)
    force = Boolean(default=False)
    expected_version = Integer()
    changed_by = Identifier()


@dispatch.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)
        order.assert_version(command.expected_version)

        decision = order.change_status(
            command.status,
            force=bool(command.force),
            notes=command.notes,
            cancellation_reason=command.cancellation_reason,
            changed_by=command.changed_by,
        )
        repo.add(order)

        if decision.forced:
            logger.warning(
                "Forced order status override",
                order_id=str(order.id),
                previous_status=decision.current.value,
                new_status=decision.requested.value,
                changed_by=command.changed_by,
            )
        else:
            logger.info(
                "Order status changed",
                order_id=str(order.id),
                previous_status=decision.current.value,
                new_status=decision.requested.value,
            )

        return {
            "id": str(order.id),
            "status": order.status,
            "updated_at": order.updated_at,
            "version": order.version,
            "forced": decision.forced,
        }
