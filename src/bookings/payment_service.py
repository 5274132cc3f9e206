"""
Payment lifecycle for bookings.

    pending -> paid       (materializes the ticket credential)
    pending -> failed
    paid    -> refunded
    failed  -> pending    (caller-initiated retry)

Gateway callbacks and the simulated payment path both go through
`update_payment_status`. Re-applying the current status is a no-op.
"""

import logging
import random
import secrets
import time
from datetime import datetime
from typing import Callable, Dict, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.models import Booking
from src.bookings.exceptions import NotFoundError, InvalidPaymentStatusError, BookingStorageError
from src.bookings.ledger import BookingLedger
from src.bookings.reference import BASE36_ALPHABET
from src.bookings.schemas import BookingStatus, PaymentStatus
from src.bookings.ticket_service import generate_ticket_credential

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},
    PaymentStatus.REFUNDED: set(),
}

def parse_payment_status(value) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidPaymentStatusError(f"Invalid payment status: {value}") from None

def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS[current]

def generate_payment_reference(clock: Callable[[], float] = time.time) -> str:
    suffix = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(6))
    return f"PAY_{int(clock() * 1000)}_{suffix}"

class PaymentService:
    """Applies payment status changes to booking ledger rows"""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
        success_rate: Optional[float] = None
    ):
        self.db = db
        self.ledger = BookingLedger(db)
        self.clock = clock
        self.rng = rng or random.Random()
        self.success_rate = settings.PAYMENT_SIMULATION_SUCCESS_RATE if success_rate is None else success_rate

    def update_payment_status(
        self,
        booking_id: str,
        payment_status,
        payment_reference: Optional[str] = None
    ) -> Booking:
        """Apply a payment status change, issuing the ticket credential on `paid`"""
        target = parse_payment_status(payment_status)

        try:
            booking = self.db.query(Booking).filter(Booking.id == booking_id).with_for_update().first()
            if not booking:
                raise NotFoundError("Booking not found")

            current = PaymentStatus(booking.payment_status)
            if not can_transition(current, target):
                raise InvalidPaymentStatusError(
                    f"Cannot change payment status from {current.value} to {target.value}"
                )
            # Seats of a cancelled booking are already released; it can be refunded but never paid
            if booking.booking_status == BookingStatus.CANCELLED.value and target == PaymentStatus.PAID and current != target:
                raise InvalidPaymentStatusError("Cannot pay for a cancelled booking")

            now = self.clock()
            booking.payment_status = target.value
            booking.updated_at = now
            if payment_reference:
                booking.payment_reference = payment_reference
            if target == PaymentStatus.PAID and not booking.ticket_credential:
                booking.ticket_credential = generate_ticket_credential(booking.id, now)

            self.db.commit()
        except (NotFoundError, InvalidPaymentStatusError):
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Payment status update failed", extra={"booking_id": booking_id}, exc_info=True)
            raise BookingStorageError("Failed to update payment status") from e

        self.db.refresh(booking)
        logger.info(
            "Payment status updated",
            extra={"booking_id": booking_id, "payment_status": target.value}
        )
        return booking

    def simulate_payment(self, booking_id: str, user_id: Optional[int] = None, payment_method: str = "card") -> Booking:
        """Demo payment path: succeeds with the configured probability"""
        booking = self.ledger.get(booking_id, user_id)
        if not booking:
            raise NotFoundError("Booking not found")

        if booking.booking_status == BookingStatus.CANCELLED.value:
            raise InvalidPaymentStatusError("Cannot pay for a cancelled booking")
        if booking.payment_status == PaymentStatus.PAID.value:
            raise InvalidPaymentStatusError("Booking is already paid")
        if booking.payment_status != PaymentStatus.PENDING.value:
            raise InvalidPaymentStatusError(
                f"Payment can only be attempted on pending bookings (current: {booking.payment_status})"
            )

        payment_success = self.rng.random() < self.success_rate
        payment_reference = generate_payment_reference()
        target = PaymentStatus.PAID if payment_success else PaymentStatus.FAILED

        if booking.payment_method != payment_method:
            booking.payment_method = payment_method

        logger.info(
            "Simulated payment processed",
            extra={"booking_id": booking_id, "payment_status": target.value}
        )
        return self.update_payment_status(booking_id, target, payment_reference)
