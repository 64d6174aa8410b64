"""Booking errors surfaced to callers.

Each carries a user-facing message and the HTTP status the API layer
renders it with. None of them are retried by the core.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Raised when input is missing or malformed."""
    status_code = 400


class NotFoundError(BookingError):
    """Raised when a ride, request or user cannot be found."""
    status_code = 404


class ForbiddenError(BookingError):
    """Raised when the actor does not own the ride being changed."""
    status_code = 403


class InvalidStateError(BookingError):
    """Raised when the operation is illegal for the current status."""
    status_code = 409


class CapacityError(BookingError):
    """Raised when a ride has no seats left."""
    status_code = 409


class DuplicateError(BookingError):
    """Raised when a record that must be unique already exists."""
    status_code = 409
