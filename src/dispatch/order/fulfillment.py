"""Driver field flows — picking and delivery, driven by the driver themselves.

All four moves go through the strict transition table; there is no force mode
here. The acting driver must hold the right role, be eligible for assignment
and, past the first step of each leg, be the driver bound to the order.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dispatch.access import UserRole
from dispatch.domain import dispatch
from dispatch.driver.driver import Driver
from dispatch.exceptions import Forbidden, IneligibleDriver
from dispatch.order.lifecycle import OrderStatus, is_assignment_eligible
from dispatch.order.order import Order
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Order")
class StartPicking:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@dispatch.command(part_of="Order")
class CompletePicking:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@dispatch.command(part_of="Order")
class AcceptDelivery:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@dispatch.command(part_of="Order")
class CompleteDelivery:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    proof_url = String(max_length=1000)


def _acting_driver(driver_id, role: UserRole) -> Driver:
    driver = current_domain.repository_for(Driver).find_live(driver_id)
    if driver.role != role.value:
        raise Forbidden(
            f"Only a {role.value} can perform this action",
            driver_id=str(driver.id),
            role=driver.role,
        )
    if not is_assignment_eligible(driver):
        raise IneligibleDriver(
            "Driver is not verified for fulfillment",
            driver_id=str(driver.id),
            verification_status=driver.verification_status,
        )
    return driver


def _assert_bound(order: Order, driver: Driver) -> None:
    if order.driver_id is None or str(order.driver_id) != str(driver.id):
        raise Forbidden(
            "Order is not assigned to this driver",
            order_id=str(order.id),
            driver_id=str(driver.id),
        )


def _result(order: Order) -> dict:
    return {
        "id": str(order.id),
        "status": order.status,
        "driver_id": str(order.driver_id) if order.driver_id else None,
        "updated_at": order.updated_at,
        "version": order.version,
    }


@dispatch.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(StartPicking)
    def start_picking(self, command):
        helper = _acting_driver(command.driver_id, UserRole.PICKUP_HELPER)
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)
        if order.driver_id is not None and str(order.driver_id) != str(helper.id):
            raise Forbidden(
                "Order is already assigned to another driver",
                order_id=str(order.id),
                driver_id=str(helper.id),
            )

        order.change_status(OrderStatus.PICKING.value, changed_by=str(helper.id))
        order.assign_driver(str(helper.id))
        repo.add(order)
        logger.info("Picking started", order_id=str(order.id), driver_id=str(helper.id))
        return _result(order)

    @handle(CompletePicking)
    def complete_picking(self, command):
        helper = _acting_driver(command.driver_id, UserRole.PICKUP_HELPER)
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)
        _assert_bound(order, helper)

        order.change_status(OrderStatus.PICKED.value, changed_by=str(helper.id))
        repo.add(order)
        logger.info("Picking completed", order_id=str(order.id), driver_id=str(helper.id))
        return _result(order)

    @handle(AcceptDelivery)
    def accept_delivery(self, command):
        driver = _acting_driver(command.driver_id, UserRole.DELIVERY_DRIVER)
        drivers = current_domain.repository_for(Driver)
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)

        # A pickup helper's claim ends at PICKED; another delivery driver's does not
        if order.driver_id is not None and str(order.driver_id) != str(driver.id):
            holder = drivers.find(order.driver_id)
            if holder.role == UserRole.DELIVERY_DRIVER.value:
                raise Forbidden(
                    "Order is already assigned to another delivery driver",
                    order_id=str(order.id),
                    driver_id=str(driver.id),
                )

        order.change_status(OrderStatus.OUT_FOR_DELIVERY.value, changed_by=str(driver.id))
        order.assign_driver(str(driver.id))
        repo.add(order)
        logger.info("Delivery accepted", order_id=str(order.id), driver_id=str(driver.id))
        return _result(order)

    @handle(CompleteDelivery)
    def complete_delivery(self, command):
        driver = _acting_driver(command.driver_id, UserRole.DELIVERY_DRIVER)
        repo = current_domain.repository_for(Order)
        order = repo.find_live(command.order_id)
        _assert_bound(order, driver)

        notes = f"Delivery proof: {command.proof_url}" if command.proof_url else None
        order.change_status(OrderStatus.DELIVERED.value, notes=notes, changed_by=str(driver.id))
        repo.add(order)
        logger.info("Order delivered", order_id=str(order.id), driver_id=str(driver.id))
        return _result(order)
