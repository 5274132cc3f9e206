"""
Booking & Ticketing System Module

Seat reservation for the Transit Booking System. It includes:

- Booking creation that never oversells a departure
- Idempotent cancellation with time-based refunds
- Payment status lifecycle and ticket credential issuance
- Booking lookup, paging and statistics

Key Components:
- booking_service.py: Reservation coordinator (create/cancel as one transaction)
- ledger.py: Booking rows, queries and statistics
- payment_service.py: Payment state machine and simulated payments
- refund_policy.py: Refund amount from cancellation timing
- reference.py: Human-shareable booking references
- ticket_service.py: Ticket credential encoding and QR rendering
- exceptions.py: Error kinds surfaced to callers
- router.py: FastAPI endpoints for bookings and payments
- schemas.py: Pydantic models for booking data structures
"""

from .router import router
from .booking_service import BookingService
from .payment_service import PaymentService
from .ledger import BookingLedger
from .refund_policy import calculate_refund_amount
from .exceptions import (
    BookingError, BookingErrorKind, NotFoundError, InsufficientCapacityError,
    AlreadyCancelledError, BookingValidationError, InvalidPaymentStatusError,
    InventoryInvariantError, BookingStorageError
)
from .schemas import (
    BookingCreateRequest, BookingResponse, BookingStatus, PaymentStatus,
    PassengerDetail, BookingStats
)

__all__ = [
    "router",
    "BookingService",
    "PaymentService",
    "BookingLedger",
    "calculate_refund_amount",
    "BookingError",
    "BookingErrorKind",
    "NotFoundError",
    "InsufficientCapacityError",
    "AlreadyCancelledError",
    "BookingValidationError",
    "InvalidPaymentStatusError",
    "InventoryInvariantError",
    "BookingStorageError",
    "BookingCreateRequest",
    "BookingResponse",
    "BookingStatus",
    "PaymentStatus",
    "PassengerDetail",
    "BookingStats"
]
