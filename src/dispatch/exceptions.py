"""Dispatch error taxonomy.

Every class is terminal for the core: it is raised once and surfaced to the
caller unchanged. ``Conflict`` is the only one callers are expected to retry
(reload the order and reapply the change).
"""


class DispatchError(Exception):
    """Base class for dispatch domain errors."""

    code = "DispatchError"
    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFound(DispatchError):
    """An order or driver id does not resolve to a live record."""

    code = "NotFound"
    status_code = 404


class Forbidden(DispatchError):
    """The caller's role does not permit the operation."""

    code = "Forbidden"
    status_code = 403


class IllegalTransition(DispatchError):
    """The requested status change is not in the transition table."""

    code = "IllegalTransition"
    status_code = 400


class IneligibleDriver(DispatchError):
    """The driver fails the role, verification or soft-delete check."""

    code = "IneligibleDriver"
    status_code = 400


class Conflict(DispatchError):
    """A conditional write lost the race against a newer version."""

    code = "Conflict"
    status_code = 409


class MalformedInput(DispatchError):
    """Input rejected before any storage access."""

    code = "MalformedInput"
    status_code = 400
