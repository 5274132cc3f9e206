"""Booking engine error taxonomy.

Callers branch on ``kind`` (or the exception class), never on message text.
"""

from enum import Enum


class BookingErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INSUFFICIENT_CAPACITY = "insufficient_capacity"
    ALREADY_CANCELLED = "already_cancelled"
    VALIDATION_ERROR = "validation_error"
    INVALID_STATUS = "invalid_status"
    INTERNAL_ERROR = "internal_error"


class BookingError(Exception):
    kind = BookingErrorKind.INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(BookingError):
    kind = BookingErrorKind.NOT_FOUND
    status_code = 404


class InsufficientCapacityError(BookingError):
    kind = BookingErrorKind.INSUFFICIENT_CAPACITY
    status_code = 409

    def __init__(self, message: str = "Not enough seats available"):
        super().__init__(message)


class AlreadyCancelledError(BookingError):
    kind = BookingErrorKind.ALREADY_CANCELLED
    status_code = 409

    def __init__(self, message: str = "Booking already cancelled"):
        super().__init__(message)


class BookingValidationError(BookingError):
    kind = BookingErrorKind.VALIDATION_ERROR
    status_code = 422


class InvalidPaymentStatusError(BookingError):
    kind = BookingErrorKind.INVALID_STATUS
    status_code = 400


class InventoryInvariantError(BookingError):
    """Releasing seats would push a departure above its capacity."""


class BookingStorageError(BookingError):
    """Opaque storage failure (connection loss, aborted transaction)."""
