"""
Cost aggregation for bookings and catalog templates.

Pure functions, no database access. The same formulas price a catalog for
display, a booking for its detail view and the amount a payment is created
with, so what the customer sees is what the customer is charged.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Union
import math

CENT = Decimal("0.01")

Money = Union[Decimal, int, float, str]
DateLike = Union[date, datetime]


def to_money(value: Money) -> Decimal:
    """Coerce to a Decimal rounded to cents. Floats go through str() to avoid binary noise."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def stay_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    Billable nights for a stay: calendar-day difference, partial days round up,
    and a zero or negative stay still bills one night.
    """
    if isinstance(check_in, datetime) or isinstance(check_out, datetime):
        start = check_in if isinstance(check_in, datetime) else datetime.combine(check_in, datetime.min.time())
        end = check_out if isinstance(check_out, datetime) else datetime.combine(check_out, datetime.min.time())
        nights = math.ceil((end - start).total_seconds() / 86400)
    else:
        nights = (check_out - check_in).days
    return max(nights, 1)


def hotel_line_cost(rent: Money, rooms_booked: int, check_in: DateLike, check_out: DateLike) -> Decimal:
    return to_money(to_money(rent) * rooms_booked * stay_nights(check_in, check_out))


def hotel_line_cost_for_nights(rent: Money, rooms_booked: int, nights: int) -> Decimal:
    return to_money(to_money(rent) * rooms_booked * max(nights, 1))


def transport_line_cost(fare: Money, seats_booked: int) -> Decimal:
    return to_money(to_money(fare) * seats_booked)


def food_line_cost(price: Money, quantity: int) -> Decimal:
    return to_money(to_money(price) * quantity)


@dataclass(frozen=True)
class CostBreakdown:
    hotel_cost: Decimal
    transport_cost: Decimal
    food_cost: Decimal

    @property
    def total(self) -> Decimal:
        return to_money(self.hotel_cost + self.transport_cost + self.food_cost)

    def as_dict(self) -> dict:
        return {
            "total_hotel_cost": self.hotel_cost,
            "total_transport_cost": self.transport_cost,
            "total_food_cost": self.food_cost,
            "grand_total": self.total,
        }


def booking_total(
    hotels: Iterable[Tuple[Money, int, DateLike, DateLike]] = (),
    transport: Iterable[Tuple[Money, int]] = (),
    food: Iterable[Tuple[Money, int]] = (),
) -> CostBreakdown:
    """
    Sum every line-cost family.

    hotels:    (rent, rooms_booked, check_in, check_out)
    transport: (fare, seats_booked)
    food:      (price, quantity)
    """
    hotel_cost = sum((hotel_line_cost(*line) for line in hotels), Decimal("0.00"))
    transport_cost = sum((transport_line_cost(*line) for line in transport), Decimal("0.00"))
    food_cost = sum((food_line_cost(*line) for line in food), Decimal("0.00"))
    return CostBreakdown(
        hotel_cost=to_money(hotel_cost),
        transport_cost=to_money(transport_cost),
        food_cost=to_money(food_cost),
    )


def booking_cost_breakdown(booking) -> CostBreakdown:
    """Cost of a persisted booking's line items (hotel/transport/food relationships loaded)."""
    return booking_total(
        hotels=[(bh.hotel.rent, bh.rooms_booked, bh.check_in, bh.check_out) for bh in booking.hotels],
        transport=[(bt.transport.fare, bt.seats_booked) for bt in booking.transport],
        food=[(bf.food.price, bf.quantity) for bf in booking.food],
    )
