"""Driver Directory — read access to fulfillment profiles."""

from protean.exceptions import ObjectNotFoundError

from dispatch.domain import dispatch
from dispatch.driver.driver import Driver, VerificationStatus
from dispatch.exceptions import NotFound
from dispatch.utils.query import scan


@dispatch.repository(part_of=Driver)
class DriverRepository:
    """Repository for the Driver aggregate.

    Presence changes outside this service, so nothing here is cached: every
    call reads the store again.
    """

    def find(self, driver_id: str) -> Driver:
        """Load a driver, soft-deleted or not."""
        try:
            return self.get(driver_id)
        except ObjectNotFoundError:
            raise NotFound("Driver not found", driver_id=str(driver_id)) from None

    def find_live(self, driver_id: str) -> Driver:
        """Load a driver that has not been soft-deleted."""
        driver = self.find(driver_id)
        if driver.is_deleted:
            raise NotFound("Driver not found", driver_id=str(driver_id))
        return driver

    def online_verified(self) -> list[Driver]:
        """Live, verified drivers currently flagged online."""
        drivers = scan(
            self._dao.query.filter(
                verification_status=VerificationStatus.VERIFIED.value,
                is_online=True,
            )
        )
        return [d for d in drivers if not d.is_deleted]
