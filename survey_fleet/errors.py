"""Exception types shared across the fleet service."""


class FleetError(Exception):
    """Base class for fleet management errors."""


class ValidationError(FleetError, ValueError):
    """Input rejected before any persistence attempt."""


class NotFoundError(FleetError, LookupError):
    """Requested entity does not exist."""


class PreconditionError(FleetError):
    """Operation is not allowed in the entity's current state."""


class InvalidTransitionError(PreconditionError):
    """Mission status change not present in the transition table."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition mission from '{current}' to '{target}'")


class PersistenceError(FleetError):
    """Storage failure surfaced to the caller with a generic message."""
