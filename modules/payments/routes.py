from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.base import get_db
from modules.bookings.service import BookingService
from modules.payments.schemas import (
    ProcessPaymentRequest, ProcessPaymentResponse,
    CompletePaymentRequest, PaymentStatusUpdate, PaymentResponse,
)
from modules.payments.service import PaymentService
from shared.dependencies import CurrentUser, get_current_user, get_admin_user, ensure_owner_or_admin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[PaymentResponse])
def list_all_payments(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_admin_user)
):
    """
    List all payments with customer names, newest first (Admin only).
    """
    return PaymentService(db).list_all()


@router.get("/booking/{booking_id}", response_model=PaymentResponse)
def get_booking_payment(
    booking_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Get the payment attached to a booking.
    """
    booking = BookingService(db).get_booking(booking_id)
    ensure_owner_or_admin(current_user, booking.customer_id)
    return PaymentService(db).get_by_booking_id(booking_id)


@router.post("", response_model=ProcessPaymentResponse, status_code=status.HTTP_201_CREATED)
def process_payment(
    request: ProcessPaymentRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Create the pending payment for a booking.

    The amount is computed from the booking's items. A booking can have only
    one payment.
    """
    booking = BookingService(db).get_booking(request.booking_id)
    ensure_owner_or_admin(current_user, booking.customer_id)

    payment_id, amount = PaymentService(db).process(
        request.booking_id,
        request.payment_method,
        transaction_id=request.transaction_id,
    )
    return ProcessPaymentResponse(
        message="Payment processed successfully",
        payment_id=payment_id,
        amount=amount,
    )


@router.post("/{payment_id}/complete", response_model=PaymentResponse)
def complete_payment(
    payment_id: str,
    request: Optional[CompletePaymentRequest] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Complete a pending payment. The booking is confirmed in the same step.
    """
    service = PaymentService(db)
    payment = service.get_payment(payment_id)
    ensure_owner_or_admin(current_user, payment.booking.customer_id)

    service.complete(payment_id, transaction_id=request.transaction_id if request else None)
    return service.get_by_id(payment_id)


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
def set_payment_status(
    payment_id: str,
    request: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_admin_user)
):
    """
    Override a payment's status (Admin only). The booking is not touched.
    """
    service = PaymentService(db)
    service.update_status_admin(payment_id, request.status, transaction_id=request.transaction_id)
    logger.info(f"[set_payment_status] {current_user.actor} set payment {payment_id} to {request.status}")
    return service.get_by_id(payment_id)
