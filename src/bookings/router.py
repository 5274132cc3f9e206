from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
import math

from src.database import get_db
from src.auth.dependencies import get_current_user_id
from src.bookings.schemas import (
    BookingCreateRequest, BookingResponse, BookingListResponse, BookingCancellationRequest,
    CancellationResult, PaymentStatusUpdateRequest, SimulatePaymentRequest, PaymentResult,
    BookingStats, BookingStatusUpdateRequest, PaymentStatus
)
from src.bookings.booking_service import BookingService
from src.bookings.exceptions import NotFoundError
from src.bookings.payment_service import PaymentService
from src.bookings.ticket_service import render_ticket_qr

router = APIRouter()

# Booking Management Endpoints
@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Reserve seats on a scheduled departure"""
    return BookingService(db).create_booking(user_id, request)

@router.get("", response_model=BookingListResponse)
def list_my_bookings(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Bookings per page"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Bookings of the current user, newest first"""
    items, total = BookingService(db).list_bookings_for_user(user_id, page, limit)
    return BookingListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit)
    )

@router.get("/stats", response_model=BookingStats)
def get_my_booking_stats(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Booking counts and paid total for the current user"""
    return BookingService(db).get_booking_stats(user_id)

@router.get("/reference/{booking_reference}", response_model=BookingResponse)
def get_booking_by_reference(
    booking_reference: str,
    db: Session = Depends(get_db)
):
    """Get booking by reference number"""
    return BookingService(db).get_booking_by_reference(booking_reference)

# Payment Endpoints
@router.post("/payment-status")
def update_payment_status(
    request: PaymentStatusUpdateRequest,
    db: Session = Depends(get_db)
):
    """Payment gateway callback"""
    booking = PaymentService(db).update_payment_status(
        request.booking_id,
        request.payment_status,
        request.payment_reference
    )
    return {
        "success": True,
        "message": "Payment status updated successfully",
        "booking_id": booking.id,
        "payment_status": booking.payment_status
    }

@router.post("/simulate-payment", response_model=PaymentResult)
def simulate_payment(
    request: SimulatePaymentRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Simulated payment for demo environments"""
    booking = PaymentService(db).simulate_payment(request.booking_id, user_id, request.payment_method)
    paid = booking.payment_status == PaymentStatus.PAID.value
    return PaymentResult(
        success=paid,
        booking_id=booking.id,
        payment_status=booking.payment_status,
        payment_reference=booking.payment_reference if paid else None,
        amount=booking.total_amount
    )

@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get one of the current user's bookings"""
    return BookingService(db).get_booking(booking_id, user_id)

@router.post("/{booking_id}/cancel", response_model=CancellationResult)
def cancel_booking(
    booking_id: str,
    request: BookingCancellationRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Cancel a booking and report the refund owed"""
    service = BookingService(db)
    cancelled = service.cancel_booking(booking_id, user_id, request.reason)
    booking = service.get_booking(booking_id, user_id)
    return CancellationResult(
        success=cancelled,
        booking_id=booking.id,
        refund_amount=booking.refund_amount
    )

@router.put("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    request: BookingStatusUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Mark one of the current user's bookings confirmed, completed or no-show"""
    service = BookingService(db)
    service.get_booking(booking_id, user_id)
    return service.update_booking_status(booking_id, request.booking_status)

@router.get("/{booking_id}/ticket/qr")
def get_ticket_qr(
    booking_id: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """QR code of the ticket credential; only paid bookings have one"""
    booking = BookingService(db).get_booking(booking_id, user_id)
    if not booking.ticket_credential:
        raise NotFoundError("Ticket not issued for this booking")
    return Response(content=render_ticket_qr(booking.ticket_credential), media_type="image/png")
