"""Driver presence — commands issued by the presence heartbeat collaborator."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.driver.driver import Driver
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Driver")
class GoOnline:
    driver_id = Identifier(required=True)


@dispatch.command(part_of="Driver")
class GoOffline:
    driver_id = Identifier(required=True)


@dispatch.command_handler(part_of=Driver)
class PresenceHandler:
    @handle(GoOnline)
    def go_online(self, command):
        repo = current_domain.repository_for(Driver)
        driver = repo.find(command.driver_id)
        driver.go_online()
        repo.add(driver)
        logger.info("Driver online", driver_id=str(driver.id))

    @handle(GoOffline)
    def go_offline(self, command):
        repo = current_domain.repository_for(Driver)
        driver = repo.find(command.driver_id)
        driver.go_offline()
        repo.add(driver)
        logger.info("Driver offline", driver_id=str(driver.id))
