from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from src.models import Booking
from src.bookings.schemas import BookingStats, BookingStatus, PaymentStatus

class BookingLedger:
    """Durable record of bookings. Rows are only ever transitioned, never deleted."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def get(self, booking_id: str, user_id: Optional[int] = None) -> Optional[Booking]:
        """Get booking by ID, restricted to its owner when `user_id` is given"""
        query = self.db.query(Booking).filter(Booking.id == booking_id)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        return query.first()

    def get_by_reference(self, booking_reference: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.booking_reference == booking_reference).first()

    def list_for_user(self, user_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Booking], int]:
        """Newest first, one page at a time"""
        query = self.db.query(Booking).filter(Booking.user_id == user_id)
        total = query.count()
        offset = (max(page, 1) - 1) * limit
        items = query.order_by(Booking.created_at.desc(), Booking.id).offset(offset).limit(limit).all()
        return items, total

    def mark_cancelled(self, booking_id: str, reason: Optional[str], cancelled_at: datetime) -> bool:
        """Flip a booking to cancelled; False if it was already cancelled"""
        updated = self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.booking_status != BookingStatus.CANCELLED.value
        ).update(
            {
                Booking.booking_status: BookingStatus.CANCELLED.value,
                Booking.cancellation_reason: reason,
                Booking.cancelled_at: cancelled_at,
                Booking.updated_at: cancelled_at,
            },
            synchronize_session=False
        )
        return updated == 1

    def set_refund_amount(self, booking_id: str, refund_amount: Decimal):
        self.db.query(Booking).filter(Booking.id == booking_id).update(
            {Booking.refund_amount: refund_amount},
            synchronize_session=False
        )

    def set_booking_status(self, booking_id: str, booking_status: str) -> bool:
        updated = self.db.query(Booking).filter(Booking.id == booking_id).update(
            {Booking.booking_status: booking_status, Booking.updated_at: datetime.now()},
            synchronize_session=False
        )
        return updated == 1

    def stats(self, user_id: Optional[int] = None) -> BookingStats:
        query = self.db.query(
            func.count(Booking.id),
            func.count(case((Booking.booking_status == BookingStatus.CONFIRMED.value, 1))),
            func.count(case((Booking.booking_status == BookingStatus.COMPLETED.value, 1))),
            func.count(case((Booking.booking_status == BookingStatus.CANCELLED.value, 1))),
            func.coalesce(func.sum(case(
                (Booking.payment_status == PaymentStatus.PAID.value, Booking.total_amount),
                else_=0
            )), 0),
        )
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)

        total, confirmed, completed, cancelled, amount_paid = query.one()
        return BookingStats(
            total=total,
            confirmed=confirmed,
            completed=completed,
            cancelled=cancelled,
            total_amount_paid=Decimal(str(amount_paid)).quantize(Decimal('0.01'))
        )
