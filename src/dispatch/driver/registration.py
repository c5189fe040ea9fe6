"""Driver registration, verification and removal — commands and handlers."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.driver.driver import Driver
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Driver")
class RegisterDriver:
    """Create a fulfillment profile for a platform user."""

    user_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    phone = String(max_length=20)
    role = String(required=True, max_length=30)


@dispatch.command(part_of="Driver")
class SetDriverVerification:
    """Record the outcome of a driver's document verification."""

    driver_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@dispatch.command(part_of="Driver")
class RemoveDriver:
    """Soft-delete a driver profile."""

    driver_id = Identifier(required=True)


@dispatch.command_handler(part_of=Driver)
class DriverRegistrationHandler:
    @handle(RegisterDriver)
    def register_driver(self, command):
        driver = Driver.register(
            user_id=command.user_id,
            name=command.name,
            role=command.role,
            phone=command.phone,
        )
        current_domain.repository_for(Driver).add(driver)
        logger.info("Driver registered", driver_id=str(driver.id), role=driver.role)
        return str(driver.id)

    @handle(SetDriverVerification)
    def set_driver_verification(self, command):
        repo = current_domain.repository_for(Driver)
        driver = repo.find(command.driver_id)
        driver.set_verification(command.status)
        repo.add(driver)
        logger.info(
            "Driver verification updated",
            driver_id=str(driver.id),
            verification_status=driver.verification_status,
        )

    @handle(RemoveDriver)
    def remove_driver(self, command):
        repo = current_domain.repository_for(Driver)
        driver = repo.find(command.driver_id)
        driver.remove()
        repo.add(driver)
        logger.info("Driver removed", driver_id=str(driver.id))
