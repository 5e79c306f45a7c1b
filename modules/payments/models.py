from sqlalchemy import Column, String, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from database.base import Base
from database.mixins import OpaqueIdMixin, TimestampMixin, OpaqueId
from shared.utils import enum_values


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(Base, OpaqueIdMixin, TimestampMixin):
    __tablename__ = "payments"

    # unique: at most one payment per booking, enforced by the database
    booking_id = Column(OpaqueId(), ForeignKey("bookings.id"), nullable=False, unique=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod, values_callable=enum_values, name="payment_method"), nullable=False)
    status = Column(
        SQLEnum(PaymentStatus, values_callable=enum_values, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    transaction_id = Column(String(100), nullable=True, index=True)  # external reference

    booking = relationship("Booking", back_populates="payment")

    def __repr__(self):
        return f"<Payment {self.id} {self.status}>"
