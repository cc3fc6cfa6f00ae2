class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PunchRejectedError(ValidationError):
    """Raised when a punch does not follow from the employee's current state."""


class NotFoundError(DomainError):
    """Raised when a referenced employee does not exist."""
