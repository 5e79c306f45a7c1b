"""
Line-item composition for new bookings.

Both modes validate everything before the first row is written, then add the
booking and all of its line items to the caller's session. The caller owns the
transaction: either the whole set is committed or none of it is.
"""
from sqlalchemy.orm import Session
from datetime import date
from typing import Callable, List, Optional, Sequence
import logging

from modules.bookings.models import Booking, BookingHotel, BookingTransport, BookingFood, BookingStatus
from modules.bookings.schemas import HotelItemCreate, TransportItemCreate, FoodItemCreate
from modules.catalogs.service import CatalogService
from modules.inventory.models import Hotel, Transport, Food
from modules.users.models import Customer
from shared.exceptions import NotFoundException, BadRequestException, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_DESCRIPTION = "Custom booking"


class LineItemComposer:
    def __init__(self, db: Session, today: Optional[Callable[[], date]] = None):
        self.db = db
        self.catalogs = CatalogService(db)
        self._today = today or date.today

    def _require_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFoundException(f"Customer {customer_id} not found", ErrorCode.CUSTOMER_NOT_FOUND)
        return customer

    def compose_from_catalog(
        self,
        customer_id: int,
        catalog_id: int,
        description: Optional[str],
        check_in: date,
        check_out: date,
        travel_date: date,
    ) -> Booking:
        """Copy every item of a catalog template into a new pending booking."""
        catalog = self.catalogs.get_catalog(catalog_id)
        if not catalog:
            raise NotFoundException(f"Catalog {catalog_id} not found", ErrorCode.CATALOG_NOT_FOUND)

        self._require_customer(customer_id)

        if check_out <= check_in:
            raise BadRequestException("Check-out date must be after check-in date", ErrorCode.INVALID_DATE_RANGE)

        if check_in < self._today():
            raise BadRequestException("Check-in date cannot be in the past", ErrorCode.DATE_IN_PAST)

        booking = Booking(
            customer_id=customer_id,
            catalog_id=catalog.id,
            is_custom=False,
            description=description or catalog.package_name,
            status=BookingStatus.PENDING,
        )
        booking.hotels = [
            BookingHotel(
                hotel_id=ch.hotel_id,
                hotel=ch.hotel,
                rooms_booked=ch.rooms_included,
                check_in=check_in,
                check_out=check_out,
            )
            for ch in catalog.hotels
        ]
        booking.transport = [
            BookingTransport(
                transport_id=ct.transport_id,
                transport=ct.transport,
                seats_booked=ct.seats_included,
                travel_date=travel_date,
            )
            for ct in catalog.transport
        ]
        booking.food = [
            BookingFood(food_id=cf.food_id, food=cf.food, quantity=1)
            for cf in catalog.food
        ]

        self.db.add(booking)
        self.db.flush()

        logger.info(
            f"Composed booking {booking.id} from catalog {catalog.id}: "
            f"{len(booking.hotels)} hotels, {len(booking.transport)} transport, {len(booking.food)} food"
        )
        return booking

    def compose_custom(
        self,
        customer_id: int,
        description: Optional[str],
        hotels: Sequence[HotelItemCreate] = (),
        transport: Sequence[TransportItemCreate] = (),
        food: Sequence[FoodItemCreate] = (),
    ) -> Booking:
        """One line-item row per requested element."""
        if not hotels and not transport and not food:
            raise BadRequestException(
                "At least one service (hotel/transport/food) is required",
                ErrorCode.NO_ITEMS_SPECIFIED,
            )

        self._require_customer(customer_id)

        hotel_rows = self._load(Hotel, [item.hotel_id for item in hotels], ErrorCode.HOTEL_NOT_FOUND, "Hotel")
        transport_rows = self._load(Transport, [item.transport_id for item in transport], ErrorCode.TRANSPORT_NOT_FOUND, "Transport")
        food_rows = self._load(Food, [item.food_id for item in food], ErrorCode.FOOD_NOT_FOUND, "Food")

        booking = Booking(
            customer_id=customer_id,
            catalog_id=None,
            is_custom=True,
            description=description or DEFAULT_CUSTOM_DESCRIPTION,
            status=BookingStatus.PENDING,
        )
        booking.hotels = [
            BookingHotel(
                hotel_id=item.hotel_id,
                hotel=hotel_rows[item.hotel_id],
                rooms_booked=item.rooms_booked or 1,
                check_in=item.check_in,
                check_out=item.check_out,
            )
            for item in hotels
        ]
        booking.transport = [
            BookingTransport(
                transport_id=item.transport_id,
                transport=transport_rows[item.transport_id],
                seats_booked=item.seats_booked or 1,
                travel_date=item.travel_date,
            )
            for item in transport
        ]
        booking.food = [
            BookingFood(food_id=item.food_id, food=food_rows[item.food_id], quantity=item.quantity or 1)
            for item in food
        ]

        self.db.add(booking)
        self.db.flush()

        logger.info(
            f"Composed custom booking {booking.id}: "
            f"{len(booking.hotels)} hotels, {len(booking.transport)} transport, {len(booking.food)} food"
        )
        return booking

    def _load(self, model, ids: List[int], code: ErrorCode, label: str) -> dict:
        if not ids:
            return {}
        rows = {row.id: row for row in self.db.query(model).filter(model.id.in_(set(ids))).all()}
        for item_id in ids:
            if item_id not in rows:
                raise NotFoundException(f"{label} {item_id} not found", code)
        return rows
