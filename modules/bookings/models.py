from sqlalchemy import Column, String, Date, Integer, ForeignKey, Enum as SQLEnum, Text, Boolean
from sqlalchemy.orm import relationship
import enum
from database.base import Base
from database.mixins import OpaqueIdMixin, TimestampMixin, OpaqueId
from shared.utils import enum_values


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Customer-facing transitions. The admin override bypasses this table.
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
}


class Booking(Base, OpaqueIdMixin, TimestampMixin):
    __tablename__ = "bookings"

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    catalog_id = Column(Integer, ForeignKey("catalogs.id"), nullable=True, index=True)  # NULL for custom bookings
    is_custom = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(BookingStatus, values_callable=enum_values, name="booking_status"),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Relationships
    customer = relationship("Customer", back_populates="bookings")
    catalog = relationship("Catalog")
    hotels = relationship("BookingHotel", back_populates="booking", cascade="all, delete-orphan")
    transport = relationship("BookingTransport", back_populates="booking", cascade="all, delete-orphan")
    food = relationship("BookingFood", back_populates="booking", cascade="all, delete-orphan")
    payment = relationship("Payment", back_populates="booking", uselist=False)
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingStatusHistory.created_at",
    )

    @property
    def has_items(self) -> bool:
        return bool(self.hotels or self.transport or self.food)

    def __repr__(self):
        return f"<Booking {self.id} {self.status}>"


class BookingHotel(Base):
    __tablename__ = "booking_hotels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(OpaqueId(), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False)
    rooms_booked = Column(Integer, nullable=False, default=1)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)

    booking = relationship("Booking", back_populates="hotels")
    hotel = relationship("Hotel")


class BookingTransport(Base):
    __tablename__ = "booking_transport"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(OpaqueId(), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    transport_id = Column(Integer, ForeignKey("transport.id"), nullable=False)
    seats_booked = Column(Integer, nullable=False, default=1)
    travel_date = Column(Date, nullable=False)

    booking = relationship("Booking", back_populates="transport")
    transport = relationship("Transport")


class BookingFood(Base):
    __tablename__ = "booking_food"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(OpaqueId(), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    food_id = Column(Integer, ForeignKey("food.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    booking = relationship("Booking", back_populates="food")
    food = relationship("Food")


class BookingStatusHistory(Base, OpaqueIdMixin, TimestampMixin):
    __tablename__ = "booking_status_history"

    booking_id = Column(OpaqueId(), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    old_status = Column(SQLEnum(BookingStatus, values_callable=enum_values, name="booking_status"), nullable=True)
    new_status = Column(SQLEnum(BookingStatus, values_callable=enum_values, name="booking_status"), nullable=False)
    changed_by = Column(String(50), nullable=True)  # "customer:12", "admin:1", "payment:<id>"
    reason = Column(Text, nullable=True)

    booking = relationship("Booking", back_populates="status_history")

    def __repr__(self):
        return f"<BookingStatusHistory {self.old_status} -> {self.new_status}>"
