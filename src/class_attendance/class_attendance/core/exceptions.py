class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class TimingError(ValidationError):
    """Raised when a submission falls outside the schedule's window."""


class DuplicateSubmissionError(DomainError):
    """Raised when a staff member already submitted for a schedule."""


class AuthenticationError(DomainError):
    """Raised when a PIN does not match."""

    status_code = 401


class NotFoundError(DomainError):
    """Raised when a referenced staff member or schedule does not exist."""

    status_code = 404


class DuplicateScheduleError(ValidationError):
    """Raised when a schedule already exists for the same date and start time."""
