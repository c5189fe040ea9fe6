"""Driver domain events."""

from protean.fields import DateTime, Identifier, String

from dispatch.domain import dispatch


@dispatch.event(part_of="Driver")
class DriverRegistered:
    """A fulfillment profile was registered."""

    __version__ = 1

    driver_id = Identifier(required=True)
    user_id = Identifier(required=True)
    name = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@dispatch.event(part_of="Driver")
class DriverVerificationChanged:
    """An admin changed the driver's verification state."""

    __version__ = 1

    driver_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@dispatch.event(part_of="Driver")
class DriverWentOnline:
    __version__ = 1

    driver_id = Identifier(required=True)
    occurred_at = DateTime(required=True)


@dispatch.event(part_of="Driver")
class DriverWentOffline:
    __version__ = 1

    driver_id = Identifier(required=True)
    occurred_at = DateTime(required=True)


@dispatch.event(part_of="Driver")
class DriverRemoved:
    """The driver profile was soft-deleted."""

    __version__ = 1

    driver_id = Identifier(required=True)
    removed_at = DateTime(required=True)
