from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.base import get_db
from modules.bookings.schemas import (
    CatalogBookingCreate, CustomBookingCreate, BookingCreatedResponse,
    BookingCancelRequest, BookingCancelResponse, BookingStatusUpdate,
    BookingListResponse, BookingDetailResponse,
)
from modules.bookings.service import BookingService
from shared.dependencies import CurrentUser, get_current_user, get_admin_user, ensure_owner_or_admin

logger = logging.getLogger(__name__)

router = APIRouter()


# ============ Admin Endpoints ============

@router.get("", response_model=List[BookingListResponse])
def list_all_bookings(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_admin_user)
):
    """
    List every booking, newest first (Admin only).
    """
    return BookingService(db).list_all()


@router.patch("/{booking_id}/status", response_model=BookingDetailResponse)
def set_booking_status(
    booking_id: str,
    request: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_admin_user)
):
    """
    Override a booking's status (Admin only).

    Writes the status directly: no transition rules and no payment or refund
    side effects.
    """
    service = BookingService(db)
    service.set_status_admin(booking_id, request.status, actor=current_user.actor)
    return service.get_by_id(booking_id)


# ============ Customer Endpoints ============

@router.get("/customer/{customer_id}", response_model=List[BookingListResponse])
def list_customer_bookings(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Get a customer's bookings, newest first.

    Requires: Bearer token (own bookings, or admin)
    """
    ensure_owner_or_admin(current_user, customer_id)
    bookings = BookingService(db).list_by_customer(customer_id)
    logger.info(f"[list_customer_bookings] Found {len(bookings)} bookings for customer {customer_id}")
    return bookings


@router.post("/catalog", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_catalog_booking(
    request: CatalogBookingCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Book a catalog package. Every hotel, transport and food item of the package
    is copied into the booking with the given dates.
    """
    ensure_owner_or_admin(current_user, request.customer_id)
    booking_id, total_cost = BookingService(db).create_from_catalog(
        customer_id=request.customer_id,
        catalog_id=request.catalog_id,
        description=request.booking_description,
        check_in=request.check_in,
        check_out=request.check_out,
        travel_date=request.travel_date,
    )
    return BookingCreatedResponse(
        message="Booking created successfully",
        booking_id=booking_id,
        total_cost=total_cost,
    )


@router.post("/custom", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_custom_booking(
    request: CustomBookingCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Build a booking from individually chosen hotels, transport and food.
    At least one item is required.
    """
    ensure_owner_or_admin(current_user, request.customer_id)
    booking_id, total_cost = BookingService(db).create_custom(
        customer_id=request.customer_id,
        description=request.booking_description,
        hotels=request.hotels,
        transport=request.transport,
        food=request.food,
    )
    return BookingCreatedResponse(
        message="Custom booking created successfully",
        booking_id=booking_id,
        total_cost=total_cost,
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
def get_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Get booking details with line items, cost breakdown and payment.
    """
    service = BookingService(db)
    booking = service.get_booking(booking_id)
    ensure_owner_or_admin(current_user, booking.customer_id)
    return service.get_by_id(booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingCancelResponse)
def cancel_booking(
    booking_id: str,
    request: Optional[BookingCancelRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Cancel a booking. A completed payment is refunded.
    """
    service = BookingService(db)
    booking = service.get_booking(booking_id)
    ensure_owner_or_admin(current_user, booking.customer_id)

    reason = request.reason if request else None
    refund_issued = service.cancel(booking_id, reason=reason, actor=current_user.actor)

    return BookingCancelResponse(
        message="Booking cancelled successfully" + (", payment refunded" if refund_issued else ""),
        booking_id=booking_id,
        status="cancelled",
        refund_issued=refund_issued,
    )
