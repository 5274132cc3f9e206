from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum

class BookingStatus(str, Enum):
    """Booking status enumeration"""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

PaymentMethod = Literal["online", "card", "upi", "wallet"]

# Passenger Information
class PassengerDetail(BaseModel):
    """Individual passenger on a booking"""
    name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=1, le=120)
    gender: Literal["male", "female", "other"]
    id_type: Optional[Literal["aadhar", "pan", "passport", "driving_license"]] = None
    id_number: Optional[str] = None

# Booking Request Models
class BookingCreateRequest(BaseModel):
    """Request to reserve seats on a scheduled departure"""
    schedule_id: int
    departure_station_id: int
    arrival_station_id: int
    journey_date: date
    passengers: List[PassengerDetail]
    payment_method: Optional[PaymentMethod] = None

class BookingCancellationRequest(BaseModel):
    """Request to cancel a booking"""
    reason: Optional[str] = None

class PaymentStatusUpdateRequest(BaseModel):
    """Payment gateway callback"""
    booking_id: str
    payment_status: str
    payment_reference: Optional[str] = None

class SimulatePaymentRequest(BaseModel):
    """Simulated payment for demo and test environments"""
    booking_id: str
    payment_method: PaymentMethod = "card"

class BookingStatusUpdateRequest(BaseModel):
    booking_status: Literal["confirmed", "completed", "no_show"]

# Booking Response Models
class BookingResponse(BaseModel):
    """Booking ledger entry"""
    id: str
    user_id: int
    schedule_id: int
    booking_reference: str
    passenger_count: int
    passenger_details: List[PassengerDetail]
    departure_station_id: Optional[int] = None
    arrival_station_id: Optional[int] = None
    journey_date: date
    departure_time: time
    total_amount: Decimal
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    booking_status: BookingStatus
    ticket_credential: Optional[str] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    booked_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BookingListResponse(BaseModel):
    """Paged bookings for one user"""
    items: List[BookingResponse]
    total: int
    page: int
    limit: int
    pages: int

class CancellationResult(BaseModel):
    success: bool
    booking_id: str
    refund_amount: Decimal

class PaymentResult(BaseModel):
    success: bool
    booking_id: str
    payment_status: PaymentStatus
    payment_reference: Optional[str] = None
    amount: Decimal

class BookingStats(BaseModel):
    """Booking counts and paid revenue"""
    total: int
    confirmed: int
    completed: int
    cancelled: int
    total_amount_paid: Decimal
