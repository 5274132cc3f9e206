import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.models import Booking, ScheduledDeparture
from src.bookings.exceptions import (
    BookingError, NotFoundError, InsufficientCapacityError, AlreadyCancelledError,
    BookingValidationError, InventoryInvariantError, BookingStorageError
)
from src.bookings.ledger import BookingLedger
from src.bookings.reference import generate_booking_reference
from src.bookings.refund_policy import calculate_refund_amount, departure_timestamp
from src.bookings.schemas import BookingCreateRequest, BookingStats, BookingStatus, PaymentStatus
from src.schedules.inventory import InventoryStore
from src.schedules.schemas import BOOKABLE_STATUSES
from src.schedules.service import ScheduleService

logger = logging.getLogger(__name__)

MANUAL_BOOKING_STATUSES = {
    BookingStatus.CONFIRMED.value,
    BookingStatus.COMPLETED.value,
    BookingStatus.NO_SHOW.value,
}

class BookingService:
    """Reservation coordinator.

    Creating and cancelling a booking each touch two things, the departure's
    seat counter and the booking row. Both happen inside one database
    transaction so a failure anywhere leaves neither change behind.
    """

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = datetime.now,
        reference_generator: Callable[[], str] = generate_booking_reference,
        schedule_service: Optional[ScheduleService] = None
    ):
        self.db = db
        self.clock = clock
        self.reference_generator = reference_generator
        self.inventory = InventoryStore(db)
        self.ledger = BookingLedger(db)
        self.schedule_service = schedule_service or ScheduleService(db)

    def create_booking(self, user_id: int, request: BookingCreateRequest) -> Booking:
        """Reserve seats on a departure and record the booking"""
        self._validate_request(request)

        max_attempts = max(settings.BOOKING_REFERENCE_MAX_ATTEMPTS, 1)
        for attempt in range(1, max_attempts + 1):
            booking_reference = self.reference_generator()
            try:
                booking = self._reserve_and_record(user_id, request, booking_reference)
                self.db.commit()
            except BookingError:
                self.db.rollback()
                raise
            except IntegrityError as e:
                self.db.rollback()
                if attempt < max_attempts and self.ledger.get_by_reference(booking_reference) is not None:
                    logger.warning(
                        "Booking reference collision, retrying",
                        extra={"booking_reference": booking_reference, "attempt": attempt}
                    )
                    continue
                logger.error("Booking insert rejected by database", extra={"user_id": user_id}, exc_info=True)
                raise BookingStorageError("Failed to create booking") from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error("Booking creation failed", extra={"user_id": user_id}, exc_info=True)
                raise BookingStorageError("Failed to create booking") from e

            self.db.refresh(booking)
            logger.info(
                "Booking created",
                extra={
                    "booking_reference": booking.booking_reference,
                    "user_id": user_id,
                    "schedule_id": booking.schedule_id,
                    "passenger_count": booking.passenger_count
                }
            )
            return booking

    def cancel_booking(
        self,
        booking_id: str,
        user_id: Optional[int] = None,
        reason: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> bool:
        """Cancel a booking, return its seats and record the refund owed"""
        now = now or self.clock()
        try:
            booking = self.ledger.get(booking_id, user_id)
            if not booking:
                raise NotFoundError("Booking not found")

            if booking.booking_status == BookingStatus.CANCELLED.value:
                raise AlreadyCancelledError()

            # Conditional flip: a concurrent cancel that got here first wins
            if not self.ledger.mark_cancelled(booking.id, reason, now):
                raise AlreadyCancelledError()

            if not self.inventory.release(booking.schedule_id, booking.passenger_count):
                raise InventoryInvariantError(
                    f"Releasing {booking.passenger_count} seats would exceed capacity of schedule {booking.schedule_id}"
                )

            refund_amount = calculate_refund_amount(
                departure_timestamp(booking.journey_date, booking.departure_time),
                now,
                booking.total_amount
            )
            self.ledger.set_refund_amount(booking.id, refund_amount)
            self.db.commit()
        except InventoryInvariantError:
            self.db.rollback()
            logger.error("Seat release refused", extra={"booking_id": booking_id}, exc_info=True)
            raise
        except BookingError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Booking cancellation failed", extra={"booking_id": booking_id}, exc_info=True)
            raise BookingStorageError("Failed to cancel booking") from e

        logger.info(
            "Booking cancelled",
            extra={"booking_id": booking_id, "refund_amount": str(refund_amount)}
        )
        return True

    def get_booking(self, booking_id: str, user_id: Optional[int] = None) -> Booking:
        booking = self.ledger.get(booking_id, user_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def get_booking_by_reference(self, booking_reference: str) -> Booking:
        booking = self.ledger.get_by_reference(booking_reference)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def list_bookings_for_user(self, user_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Booking], int]:
        return self.ledger.list_for_user(user_id, page, limit)

    def get_booking_stats(self, user_id: Optional[int] = None) -> BookingStats:
        return self.ledger.stats(user_id)

    def update_booking_status(self, booking_id: str, booking_status: str) -> Booking:
        """Move a live booking to confirmed / completed / no_show.

        Cancellation is not accepted here since it must return seats.
        """
        if booking_status not in MANUAL_BOOKING_STATUSES:
            raise BookingValidationError(f"Unsupported booking status: {booking_status}")

        booking = self.get_booking(booking_id)
        if booking.booking_status == BookingStatus.CANCELLED.value:
            raise AlreadyCancelledError()

        try:
            self.ledger.set_booking_status(booking_id, booking_status)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Booking status update failed", extra={"booking_id": booking_id}, exc_info=True)
            raise BookingStorageError("Failed to update booking status") from e

        self.db.refresh(booking)
        return booking

    def _validate_request(self, request: BookingCreateRequest):
        passenger_count = len(request.passengers or [])
        if passenger_count < 1:
            raise BookingValidationError("At least one passenger is required")
        if passenger_count > settings.MAX_PASSENGERS_PER_BOOKING:
            raise BookingValidationError(
                f"Maximum {settings.MAX_PASSENGERS_PER_BOOKING} passengers per booking"
            )

    def _validate_journey(self, departure: ScheduledDeparture, request: BookingCreateRequest):
        """The requested leg and date must be ones this departure actually runs"""
        if (request.departure_station_id != departure.departure_station_id
                or request.arrival_station_id != departure.arrival_station_id):
            raise BookingValidationError("Stations do not match the selected schedule")

        journey_date = request.journey_date
        if journey_date < departure.valid_from or (departure.valid_until and journey_date > departure.valid_until):
            raise BookingValidationError(f"Schedule does not run on {journey_date.isoformat()}")
        if journey_date.isoweekday() not in (departure.days_of_week or []):
            raise BookingValidationError(f"Schedule does not run on {journey_date.strftime('%A')}s")

    def _reserve_and_record(self, user_id: int, request: BookingCreateRequest, booking_reference: str) -> Booking:
        departure = self.schedule_service.get_departure(request.schedule_id)
        if not departure:
            raise NotFoundError("Schedule not found")

        if departure.status not in BOOKABLE_STATUSES:
            raise BookingValidationError(f"Departure is not open for booking (status: {departure.status})")

        self._validate_journey(departure, request)

        passenger_count = len(request.passengers)
        if not self.inventory.try_reserve(departure.id, passenger_count):
            raise InsufficientCapacityError()

        now = self.clock()
        booking = Booking(
            id=str(uuid.uuid4()),
            user_id=user_id,
            schedule_id=departure.id,
            booking_reference=booking_reference,
            passenger_count=passenger_count,
            passenger_details=[p.model_dump() for p in request.passengers],
            departure_station_id=request.departure_station_id,
            arrival_station_id=request.arrival_station_id,
            journey_date=request.journey_date,
            departure_time=departure.departure_time,
            total_amount=Decimal(departure.price) * passenger_count,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=request.payment_method or "online",
            booking_status=BookingStatus.CONFIRMED.value,
            booked_at=now,
            created_at=now,
            updated_at=now
        )
        return self.ledger.add(booking)
