"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer (or any other boundary) can catch them uniformly.  Each
carries an HTTP-style ``status_code`` so a web boundary can map them without
knowing the concrete type.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainException):
    """Input is malformed or a business rule on the input was violated."""

    status_code = 400


class InvalidStateError(DomainException):
    """The operation is not permitted from the entity's current status."""

    status_code = 400


class PermissionDeniedError(DomainException):
    """The acting user's role may not perform this operation."""

    status_code = 403


class NotFoundError(DomainException):
    """A requested entity does not exist."""

    status_code = 404


class ConflictError(DomainException):
    """The operation collides with existing state (duplicates, over-use)."""

    status_code = 409
