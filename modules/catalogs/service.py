from sqlalchemy.orm import Session, selectinload
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from modules.catalogs.models import Catalog, CatalogHotel, CatalogTransport, CatalogFood
from modules.bookings.costs import (
    CostBreakdown, booking_total, hotel_line_cost_for_nights,
    transport_line_cost, food_line_cost, to_money,
)
from shared.exceptions import NotFoundException, ErrorCode

logger = logging.getLogger(__name__)


def _with_items(query):
    return query.options(
        selectinload(Catalog.hotels).selectinload(CatalogHotel.hotel),
        selectinload(Catalog.transport).selectinload(CatalogTransport.transport),
        selectinload(Catalog.food).selectinload(CatalogFood.food),
    )


def catalog_total(catalog: Catalog, check_in: Optional[date] = None, check_out: Optional[date] = None) -> CostBreakdown:
    """
    Price a catalog template.

    With a date window the result equals what a booking copied from this
    catalog with the same window will cost. Without one, hotel nights are the
    package's number of days.
    """
    if check_in is not None and check_out is not None:
        return booking_total(
            hotels=[(ch.hotel.rent, ch.rooms_included, check_in, check_out) for ch in catalog.hotels],
            transport=[(ct.transport.fare, ct.seats_included) for ct in catalog.transport],
            food=[(cf.food.price, 1) for cf in catalog.food],
        )

    nights = catalog.no_of_days or 1
    hotel_cost = sum(
        (hotel_line_cost_for_nights(ch.hotel.rent, ch.rooms_included, nights) for ch in catalog.hotels),
        Decimal("0.00"),
    )
    return CostBreakdown(
        hotel_cost=to_money(hotel_cost),
        transport_cost=to_money(sum((transport_line_cost(ct.transport.fare, ct.seats_included) for ct in catalog.transport), Decimal("0.00"))),
        food_cost=to_money(sum((food_line_cost(cf.food.price, 1) for cf in catalog.food), Decimal("0.00"))),
    )


class CatalogService:
    """Read provider for catalog templates."""

    def __init__(self, db: Session):
        self.db = db

    def get_catalog(self, catalog_id: int) -> Optional[Catalog]:
        return _with_items(self.db.query(Catalog)).filter(Catalog.id == catalog_id).first()

    def list_catalogs(self) -> List[dict]:
        catalogs = _with_items(self.db.query(Catalog)).order_by(Catalog.id).all()
        return [self._summary(catalog) for catalog in catalogs]

    def get_catalog_detail(self, catalog_id: int) -> dict:
        catalog = self.get_catalog(catalog_id)
        if not catalog:
            raise NotFoundException("Catalog not found", ErrorCode.CATALOG_NOT_FOUND)

        nights = catalog.no_of_days or 1
        detail = self._summary(catalog)
        detail["hotels"] = [
            {
                "hotel_id": ch.hotel_id,
                "hotel_name": ch.hotel.name,
                "hotel_address": ch.hotel.address,
                "rent": to_money(ch.hotel.rent),
                "rooms_included": ch.rooms_included,
                "total_cost": hotel_line_cost_for_nights(ch.hotel.rent, ch.rooms_included, nights),
            }
            for ch in catalog.hotels
        ]
        detail["transport"] = [
            {
                "transport_id": ct.transport_id,
                "type": ct.transport.type,
                "fare": to_money(ct.transport.fare),
                "seats_included": ct.seats_included,
                "total_cost": transport_line_cost(ct.transport.fare, ct.seats_included),
            }
            for ct in catalog.transport
        ]
        detail["food"] = [
            {
                "food_id": cf.food_id,
                "meals": cf.food.meals,
                "price": to_money(cf.food.price),
                "total_cost": food_line_cost(cf.food.price, 1),
            }
            for cf in catalog.food
        ]
        return detail

    def quote(self, catalog_id: int, check_in: date, check_out: date) -> CostBreakdown:
        """What a booking from this catalog with the given stay window will cost."""
        catalog = self.get_catalog(catalog_id)
        if not catalog:
            raise NotFoundException("Catalog not found", ErrorCode.CATALOG_NOT_FOUND)
        return catalog_total(catalog, check_in, check_out)

    @staticmethod
    def _summary(catalog: Catalog) -> dict:
        costs = catalog_total(catalog)
        return {
            "catalog_id": catalog.id,
            "package_name": catalog.package_name,
            "destination": catalog.destination,
            "description": catalog.description,
            "no_of_days": catalog.no_of_days,
            "budget": to_money(catalog.budget) if catalog.budget is not None else None,
            "departure": catalog.departure,
            "arrival": catalog.arrival,
            "total_hotels": len(catalog.hotels),
            "total_transports": len(catalog.transport),
            "total_food_plans": len(catalog.food),
            "total_hotel_cost": costs.hotel_cost,
            "total_transport_cost": costs.transport_cost,
            "total_food_cost": costs.food_cost,
            "calculated_total_cost": costs.total,
        }
