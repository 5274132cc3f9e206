from sqlalchemy.orm import Session

from src.models import ScheduledDeparture

class InventoryStore:
    """Remaining-seat counter on ScheduledDeparture rows.

    Every mutation is one conditional UPDATE evaluated by the database, so
    concurrent callers on the same departure are serialized by the row lock
    instead of racing on a read-then-write. Nothing here commits; the caller
    owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def try_reserve(self, departure_id: int, count: int) -> bool:
        """Take `count` seats if that leaves the counter at zero or above"""
        self._check_count(count)
        updated = self.db.query(ScheduledDeparture).filter(
            ScheduledDeparture.id == departure_id,
            ScheduledDeparture.available_seats >= count
        ).update(
            {ScheduledDeparture.available_seats: ScheduledDeparture.available_seats - count},
            synchronize_session=False
        )
        return updated == 1

    def release(self, departure_id: int, count: int) -> bool:
        """Give back `count` seats unless that would exceed the departure's capacity"""
        self._check_count(count)
        updated = self.db.query(ScheduledDeparture).filter(
            ScheduledDeparture.id == departure_id,
            ScheduledDeparture.available_seats + count <= ScheduledDeparture.capacity
        ).update(
            {ScheduledDeparture.available_seats: ScheduledDeparture.available_seats + count},
            synchronize_session=False
        )
        return updated == 1

    def remaining_seats(self, departure_id: int) -> int:
        row = self.db.query(ScheduledDeparture.available_seats).filter(
            ScheduledDeparture.id == departure_id
        ).first()
        return row[0] if row else 0

    @staticmethod
    def _check_count(count: int):
        if count < 1:
            raise ValueError("Seat count must be at least 1")
