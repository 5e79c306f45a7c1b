from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from decimal import Decimal
from typing import List, Optional, Tuple
import logging

from database.base import transaction
from modules.bookings.models import Booking, BookingHotel, BookingTransport, BookingFood, BookingStatus
from modules.bookings.costs import booking_cost_breakdown, to_money
from modules.bookings.service import BookingService
from modules.payments.models import Payment, PaymentMethod, PaymentStatus
from shared.utils import generate_transaction_reference, format_currency, enum_value
from shared.exceptions import NotFoundException, ConflictException, BadRequestException, ErrorCode
from config.settings import settings

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Payment state machine.

    pending -> completed | failed | refunded, completed -> refunded.
    Completing a payment confirms its booking in the same transaction; the
    refund side of the coupling lives in BookingService.cancel.
    """

    def __init__(self, db: Session):
        self.db = db
        self.bookings = BookingService(db)

    def process(self, booking_id: str, method: str, transaction_id: Optional[str] = None) -> Tuple[str, Decimal]:
        """
        Create the single pending payment for a booking.

        The amount is always computed from the booking's line items, never
        taken from the caller.
        """
        with transaction(self.db):
            booking = self.db.query(Booking).options(
                selectinload(Booking.hotels).selectinload(BookingHotel.hotel),
                selectinload(Booking.transport).selectinload(BookingTransport.transport),
                selectinload(Booking.food).selectinload(BookingFood.food),
            ).filter(Booking.id == booking_id).with_for_update().first()

            if not booking:
                raise NotFoundException("Booking not found", ErrorCode.NOT_FOUND)

            if booking.status == BookingStatus.CANCELLED:
                logger.warning(f"⚠️ Payment attempt on cancelled booking {booking_id}")
                raise ConflictException("Cannot pay for a cancelled booking", ErrorCode.CANCELLED_BOOKING)

            if self._existing_payment(booking_id):
                logger.warning(f"⚠️ Duplicate payment attempt on booking {booking_id}")
                raise ConflictException("Payment already exists for this booking", ErrorCode.PAYMENT_EXISTS)

            try:
                payment_method = PaymentMethod(method)
            except ValueError:
                raise BadRequestException(
                    f"Invalid payment method. Must be one of: {', '.join(m.value for m in PaymentMethod)}",
                    ErrorCode.INVALID_METHOD,
                )

            if not booking.has_items:
                raise BadRequestException("Booking has no payable items", ErrorCode.NO_PAYABLE_ITEMS)

            amount = booking_cost_breakdown(booking).total

            payment = Payment(
                booking_id=booking.id,
                amount=amount,
                method=payment_method,
                status=PaymentStatus.PENDING,
                transaction_id=transaction_id,
            )
            self.db.add(payment)

            try:
                self.db.flush()
            except IntegrityError:
                # Another request inserted the payment between our check and our insert
                logger.warning(f"⚠️ Concurrent payment for booking {booking_id} lost the race")
                raise ConflictException("Payment already exists for this booking", ErrorCode.PAYMENT_EXISTS)

        logger.info(
            f"💳 Payment {payment.id} created for booking {booking_id}: "
            f"{format_currency(amount, settings.DEFAULT_CURRENCY)} via {payment_method.value}"
        )
        return payment.id, amount

    def complete(self, payment_id: str, transaction_id: Optional[str] = None) -> Payment:
        """
        Mark a pending payment completed and confirm its booking, atomically.

        Locks the booking row before the payment row, the same order cancel uses.
        """
        with transaction(self.db):
            payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
            if not payment:
                raise NotFoundException("Payment not found", ErrorCode.PAYMENT_NOT_FOUND)

            booking_id = payment.booking_id
            self.bookings._lock(booking_id)
            payment = self._lock(payment_id)

            if payment.status != PaymentStatus.PENDING:
                logger.warning(f"⚠️ Payment {payment_id} is {enum_value(payment.status)}, cannot complete")
                raise ConflictException(
                    f"Payment is {enum_value(payment.status)}, only pending payments can be completed",
                    ErrorCode.NOT_PENDING,
                )

            # Raises CANCELLED_BOOKING before anything on the payment is written
            self.bookings.confirm(booking_id, actor=f"payment:{payment.id}")

            payment.status = PaymentStatus.COMPLETED
            payment.transaction_id = transaction_id or payment.transaction_id or generate_transaction_reference()

        logger.info(f"✅ Payment {payment_id} completed ({payment.transaction_id}), booking {booking_id} confirmed")
        return payment

    def update_status_admin(self, payment_id: str, new_status: str, transaction_id: Optional[str] = None) -> Payment:
        """
        Admin override: write any valid payment status directly.

        No transition check and no booking cascade.
        """
        try:
            status_value = PaymentStatus(new_status)
        except ValueError:
            raise BadRequestException(
                f"Invalid status. Must be one of: {', '.join(s.value for s in PaymentStatus)}",
                ErrorCode.INVALID_STATUS,
            )

        with transaction(self.db):
            payment = self._lock(payment_id)
            old_status = payment.status
            payment.status = status_value
            if transaction_id:
                payment.transaction_id = transaction_id

        logger.info(f"🔧 Payment {payment_id} status set: {enum_value(old_status)} -> {status_value.value}")
        return payment

    # ============ Reads ============

    def get_by_booking_id(self, booking_id: str) -> dict:
        payment = self._existing_payment(booking_id)
        if not payment:
            raise NotFoundException("No payment found for this booking", ErrorCode.PAYMENT_NOT_FOUND)
        return self._to_response(payment)

    def get_by_id(self, payment_id: str) -> dict:
        payment = self.get_payment(payment_id)
        return self._to_response(payment)

    def get_payment(self, payment_id: str) -> Payment:
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundException("Payment not found", ErrorCode.PAYMENT_NOT_FOUND)
        return payment

    def list_all(self) -> List[dict]:
        payments = self.db.query(Payment).options(
            selectinload(Payment.booking).selectinload(Booking.customer)
        ).order_by(Payment.created_at.desc()).all()
        return [self._to_response(p) for p in payments]

    def _existing_payment(self, booking_id: str) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.booking_id == booking_id).first()

    def _lock(self, payment_id: str) -> Payment:
        payment = self.db.query(Payment).populate_existing().filter(
            Payment.id == payment_id
        ).with_for_update().first()
        if not payment:
            raise NotFoundException("Payment not found", ErrorCode.PAYMENT_NOT_FOUND)
        return payment

    @staticmethod
    def _to_response(payment: Payment) -> dict:
        booking = payment.booking
        customer = booking.customer if booking else None
        return {
            "payment_id": payment.id,
            "booking_id": payment.booking_id,
            "customer_id": booking.customer_id if booking else None,
            "customer_name": customer.name if customer else None,
            "amount": to_money(payment.amount),
            "payment_date": payment.created_at,
            "method": enum_value(payment.method),
            "status": enum_value(payment.status),
            "transaction_id": payment.transaction_id,
            "booking_status": enum_value(booking.status) if booking else None,
        }
