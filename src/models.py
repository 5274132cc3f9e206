from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Time, Text, ForeignKey, Numeric, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from src.database import Base

# ================================
# Stations (reference data)
# ================================
class Station(Base):
    __tablename__ = "stations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    code = Column(String(10), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    departures = relationship("ScheduledDeparture", foreign_keys="ScheduledDeparture.departure_station_id", back_populates="departure_station")
    arrivals = relationship("ScheduledDeparture", foreign_keys="ScheduledDeparture.arrival_station_id", back_populates="arrival_station")

# ================================
# Scheduled Departures (seat inventory lives here)
# ================================
class ScheduledDeparture(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="ck_schedules_available_seats_non_negative"),
        CheckConstraint("available_seats <= capacity", name="ck_schedules_available_seats_within_capacity"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    train_name = Column(String(100))
    train_number = Column(String(20))
    departure_station_id = Column(BigInteger, ForeignKey("stations.id"), nullable=False, index=True)
    arrival_station_id = Column(BigInteger, ForeignKey("stations.id"), nullable=False, index=True)
    departure_time = Column(Time, nullable=False, index=True)
    arrival_time = Column(Time, nullable=False)
    days_of_week = Column(JSON, default=lambda: [1, 2, 3, 4, 5, 6, 7])
    valid_from = Column(Date, nullable=False)
    valid_until = Column(Date)
    status = Column(String(20), default='active', index=True)
    delay_minutes = Column(Integer, default=0)
    capacity = Column(Integer, nullable=False, default=300)
    available_seats = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    departure_station = relationship("Station", foreign_keys=[departure_station_id], back_populates="departures")
    arrival_station = relationship("Station", foreign_keys=[arrival_station_id], back_populates="arrivals")
    bookings = relationship("Booking", back_populates="schedule")

    @property
    def is_active(self) -> bool:
        return self.status == 'active'

# ================================
# Bookings (ledger rows, never deleted)
# ================================
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("passenger_count >= 1", name="ck_bookings_passenger_count_positive"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(BigInteger, nullable=False, index=True)
    schedule_id = Column(BigInteger, ForeignKey("schedules.id"), nullable=False, index=True)
    booking_reference = Column(String(20), unique=True, nullable=False, index=True)
    passenger_count = Column(Integer, nullable=False, default=1)
    passenger_details = Column(JSON, nullable=False)
    departure_station_id = Column(BigInteger, ForeignKey("stations.id"))
    arrival_station_id = Column(BigInteger, ForeignKey("stations.id"))
    journey_date = Column(Date, nullable=False, index=True)
    departure_time = Column(Time, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String(20), default='pending', nullable=False, index=True)
    payment_method = Column(String(50))
    payment_reference = Column(String(100))
    booking_status = Column(String(20), default='confirmed', nullable=False, index=True)
    ticket_credential = Column(Text)
    cancellation_reason = Column(Text)
    refund_amount = Column(Numeric(10, 2))
    booked_at = Column(DateTime(timezone=True), server_default=func.now())
    cancelled_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedule = relationship("ScheduledDeparture", back_populates="bookings")
