from sqlalchemy.orm import Session, selectinload
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
import logging

from database.base import transaction
from modules.bookings.models import (
    Booking, BookingHotel, BookingTransport, BookingFood,
    BookingStatus, BookingStatusHistory, BOOKING_TRANSITIONS,
)
from modules.bookings.composer import LineItemComposer
from modules.bookings.costs import (
    booking_cost_breakdown, hotel_line_cost, stay_nights,
    transport_line_cost, food_line_cost, to_money,
)
from modules.bookings.schemas import HotelItemCreate, TransportItemCreate, FoodItemCreate
from modules.payments.models import Payment, PaymentStatus
from shared.utils import enum_value
from shared.exceptions import NotFoundException, ConflictException, BadRequestException, ErrorCode

logger = logging.getLogger(__name__)


def _with_details(query):
    return query.populate_existing().options(
        selectinload(Booking.customer),
        selectinload(Booking.catalog),
        selectinload(Booking.hotels).selectinload(BookingHotel.hotel),
        selectinload(Booking.transport).selectinload(BookingTransport.transport),
        selectinload(Booking.food).selectinload(BookingFood.food),
        selectinload(Booking.payment),
    )


class BookingService:
    """Booking lifecycle: creation, reads, cancellation and status changes."""

    def __init__(self, db: Session):
        self.db = db

    # ============ Creation ============

    def create_from_catalog(
        self,
        customer_id: int,
        catalog_id: int,
        description: Optional[str],
        check_in: date,
        check_out: date,
        travel_date: date,
    ) -> Tuple[str, Decimal]:
        with transaction(self.db):
            booking = LineItemComposer(self.db).compose_from_catalog(
                customer_id, catalog_id, description, check_in, check_out, travel_date
            )
            self._record_transition(booking, None, BookingStatus.PENDING, f"customer:{customer_id}")
            total = booking_cost_breakdown(booking).total

        logger.info(f"✅ Booking {booking.id} created from catalog {catalog_id} for customer {customer_id}, total {total}")
        return booking.id, total

    def create_custom(
        self,
        customer_id: int,
        description: Optional[str],
        hotels: Sequence[HotelItemCreate] = (),
        transport: Sequence[TransportItemCreate] = (),
        food: Sequence[FoodItemCreate] = (),
    ) -> Tuple[str, Decimal]:
        with transaction(self.db):
            booking = LineItemComposer(self.db).compose_custom(
                customer_id, description, hotels, transport, food
            )
            self._record_transition(booking, None, BookingStatus.PENDING, f"customer:{customer_id}")
            total = booking_cost_breakdown(booking).total

        logger.info(f"✅ Custom booking {booking.id} created for customer {customer_id}, total {total}")
        return booking.id, total

    # ============ Reads ============

    def get_booking(self, booking_id: str) -> Booking:
        booking = _with_details(self.db.query(Booking)).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundException("Booking not found", ErrorCode.NOT_FOUND)
        return booking

    def get_by_id(self, booking_id: str) -> dict:
        booking = self.get_booking(booking_id)
        response = self._summary(booking)
        response["customer_phone"] = booking.customer.phone if booking.customer else None

        response["hotels"] = [
            {
                "hotel_id": bh.hotel_id,
                "hotel_name": bh.hotel.name,
                "hotel_address": bh.hotel.address,
                "rent": to_money(bh.hotel.rent),
                "rooms_booked": bh.rooms_booked,
                "check_in": bh.check_in,
                "check_out": bh.check_out,
                "nights": stay_nights(bh.check_in, bh.check_out),
                "total_cost": hotel_line_cost(bh.hotel.rent, bh.rooms_booked, bh.check_in, bh.check_out),
            }
            for bh in booking.hotels
        ]
        response["transport"] = [
            {
                "transport_id": bt.transport_id,
                "type": bt.transport.type,
                "fare": to_money(bt.transport.fare),
                "seats_booked": bt.seats_booked,
                "travel_date": bt.travel_date,
                "total_cost": transport_line_cost(bt.transport.fare, bt.seats_booked),
            }
            for bt in booking.transport
        ]
        response["food"] = [
            {
                "food_id": bf.food_id,
                "meals": bf.food.meals,
                "price": to_money(bf.food.price),
                "quantity": bf.quantity,
                "total_cost": food_line_cost(bf.food.price, bf.quantity),
            }
            for bf in booking.food
        ]

        payment = booking.payment
        response["payment"] = {
            "payment_id": payment.id,
            "amount": to_money(payment.amount),
            "payment_date": payment.created_at,
            "method": enum_value(payment.method),
            "status": enum_value(payment.status),
            "transaction_id": payment.transaction_id,
        } if payment else None

        return response

    def list_by_customer(self, customer_id: int) -> List[dict]:
        bookings = _with_details(self.db.query(Booking)).filter(
            Booking.customer_id == customer_id
        ).order_by(Booking.created_at.desc()).all()
        return [self._summary(b) for b in bookings]

    def list_all(self) -> List[dict]:
        bookings = _with_details(self.db.query(Booking)).order_by(Booking.created_at.desc()).all()
        return [self._summary(b) for b in bookings]

    # ============ Status changes ============

    def cancel(self, booking_id: str, reason: Optional[str] = None, actor: Optional[str] = None) -> bool:
        """
        Cancel a pending or confirmed booking.

        A completed payment is refunded in the same transaction. Returns whether
        a refund was issued.
        """
        with transaction(self.db):
            booking = self._lock(booking_id)

            if booking.status == BookingStatus.CANCELLED:
                logger.warning(f"⚠️ Booking {booking_id} is already cancelled")
                raise ConflictException("Booking is already cancelled", ErrorCode.ALREADY_CANCELLED)

            refund_issued = False
            payment = self.db.query(Payment).populate_existing().filter(
                Payment.booking_id == booking.id
            ).with_for_update().first()
            if payment and payment.status == PaymentStatus.COMPLETED:
                payment.status = PaymentStatus.REFUNDED
                refund_issued = True

            old_status = booking.status
            booking.status = BookingStatus.CANCELLED
            self._record_transition(booking, old_status, BookingStatus.CANCELLED, actor, reason)

        if refund_issued:
            logger.info(f"💸 Booking {booking_id} cancelled, payment {payment.id} refunded")
        else:
            logger.info(f"✅ Booking {booking_id} cancelled")
        return refund_issued

    def confirm(self, booking_id: str, actor: Optional[str] = None) -> Booking:
        """
        Move a pending booking to confirmed.

        Runs inside the caller's transaction and never commits. Confirming an
        already confirmed booking changes nothing.
        """
        booking = self._lock(booking_id)

        if booking.status == BookingStatus.CONFIRMED:
            return booking
        if booking.status == BookingStatus.CANCELLED:
            raise ConflictException("Booking has been cancelled", ErrorCode.CANCELLED_BOOKING)
        if BookingStatus.CONFIRMED not in BOOKING_TRANSITIONS[booking.status]:
            raise ConflictException(f"Cannot confirm a {booking.status.value} booking", ErrorCode.NOT_PENDING)

        old_status = booking.status
        booking.status = BookingStatus.CONFIRMED
        self._record_transition(booking, old_status, BookingStatus.CONFIRMED, actor)
        logger.info(f"✅ Booking {booking_id} confirmed")
        return booking

    def set_status_admin(self, booking_id: str, new_status: str, actor: Optional[str] = None) -> Booking:
        """
        Admin override: write any valid status directly.

        No transition check and no payment side effects.
        """
        try:
            status_value = BookingStatus(new_status)
        except ValueError:
            raise BadRequestException(
                f"Invalid status. Must be one of: {', '.join(s.value for s in BookingStatus)}",
                ErrorCode.INVALID_STATUS,
            )

        with transaction(self.db):
            booking = self._lock(booking_id)
            old_status = booking.status
            booking.status = status_value
            self._record_transition(booking, old_status, status_value, actor, "admin override")

        logger.info(f"🔧 Booking {booking_id} status set by {actor}: {enum_value(old_status)} -> {status_value.value}")
        return booking

    # ============ Helpers ============

    def _lock(self, booking_id: str) -> Booking:
        booking = self.db.query(Booking).populate_existing().filter(
            Booking.id == booking_id
        ).with_for_update().first()
        if not booking:
            raise NotFoundException("Booking not found", ErrorCode.NOT_FOUND)
        return booking

    def _record_transition(
        self,
        booking: Booking,
        old_status: Optional[BookingStatus],
        new_status: BookingStatus,
        actor: Optional[str],
        reason: Optional[str] = None,
    ) -> None:
        self.db.add(BookingStatusHistory(
            booking_id=booking.id,
            old_status=old_status,
            new_status=new_status,
            changed_by=actor,
            reason=reason,
        ))

    @staticmethod
    def _summary(booking: Booking) -> dict:
        costs = booking_cost_breakdown(booking)
        customer = booking.customer
        catalog = booking.catalog
        payment = booking.payment
        return {
            "booking_id": booking.id,
            "customer_id": booking.customer_id,
            "customer_name": customer.name if customer else None,
            "customer_email": customer.email if customer else None,
            "catalog_id": booking.catalog_id,
            "package_name": catalog.package_name if catalog else None,
            "destination": catalog.destination if catalog else None,
            "is_custom": bool(booking.is_custom),
            "booking_type": "custom" if booking.is_custom else "package",
            "booking_description": booking.description,
            "booking_date": booking.created_at,
            "status": enum_value(booking.status),
            **costs.as_dict(),
            "payment_status": enum_value(payment.status) if payment else None,
            "paid_amount": to_money(payment.amount) if payment else None,
        }
