# This project was developed with assistance from AI tools.
"""Domain exceptions raised by the service layer.

Services raise these; ``src.main`` maps each to an RFC 7807 response.
Nothing here imports FastAPI so services stay framework-independent.
"""


class DomainError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 400
    problem_type = "domain-error"

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Malformed or missing input."""

    status_code = 422
    problem_type = "validation-error"


class NotFoundError(DomainError):
    """Referenced entity does not exist (or is outside the caller's scope)."""

    status_code = 404
    problem_type = "not-found"


class InvalidTransitionError(DomainError):
    """Requested status is not reachable from the current status."""

    status_code = 409
    problem_type = "invalid-transition"


class StaleCaseError(InvalidTransitionError):
    """Case changed between read and conditional write."""

    problem_type = "stale-case"


class InvalidStateError(DomainError):
    """Operation not permitted in the case's current state."""

    status_code = 409
    problem_type = "invalid-state"


class AlreadySelectedError(InvalidStateError):
    """A quotation has already been selected for this case."""

    problem_type = "already-selected"


class StorageError(DomainError):
    """Persistence layer failure."""

    status_code = 503
    problem_type = "storage-unavailable"
