"""Order soft-delete — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.order.order import Order
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Order")
class DeleteOrder:
    """Hide an order from every normal query while keeping it for audit."""

    order_id = Identifier(required=True)


@dispatch.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)
        order.soft_delete()
        repo.add(order)
        logger.info("Order soft-deleted", order_id=str(order.id))
