"""Order ↔ driver binding — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.driver.driver import Driver
from dispatch.exceptions import IneligibleDriver
from dispatch.order.lifecycle import is_assignment_eligible
from dispatch.order.order import Order
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Order")
class AssignDriver:
    """Point an order at a driver, replacing any previous assignment."""

    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    expected_version = Integer()
    assigned_by = Identifier()


@dispatch.command_handler(part_of=Order)
class AssignDriverHandler:
    @handle(AssignDriver)
    def assign_driver(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.find_live(command.order_id)
        order.assert_version(command.expected_version)

        driver = current_domain.repository_for(Driver).find(command.driver_id)
        if not is_assignment_eligible(driver):
            logger.info(
                "Assignment rejected: driver not eligible",
                order_id=str(order.id),
                driver_id=str(driver.id),
                role=driver.role,
                verification_status=driver.verification_status,
            )
            raise IneligibleDriver(
                "Driver is not eligible for assignment",
                driver_id=str(driver.id),
                role=driver.role,
                verification_status=driver.verification_status,
            )

        previous = str(order.driver_id) if order.driver_id else None
        changed = order.assign_driver(str(driver.id))
        if changed:
            orders.add(order)
            logger.info(
                "Driver assigned",
                order_id=str(order.id),
                driver_id=str(driver.id),
                previous_driver_id=previous,
                assigned_by=command.assigned_by,
                driver_online=driver.is_online,
            )

        return {
            "id": str(order.id),
            "order_id": str(order.id),
            "driver_id": str(driver.id),
            "previous_driver_id": previous,
            "changed": changed,
            "version": order.version,
            "updated_at": order.updated_at,
        }
