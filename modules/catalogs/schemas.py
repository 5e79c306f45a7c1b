from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from datetime import date


class CatalogHotelResponse(BaseModel):
    hotel_id: int
    hotel_name: str
    hotel_address: Optional[str] = None
    rent: Decimal
    rooms_included: int
    total_cost: Decimal


class CatalogTransportResponse(BaseModel):
    transport_id: int
    type: str
    fare: Decimal
    seats_included: int
    total_cost: Decimal


class CatalogFoodResponse(BaseModel):
    food_id: int
    meals: str
    price: Decimal
    total_cost: Decimal


class CatalogListResponse(BaseModel):
    catalog_id: int
    package_name: str
    destination: Optional[str] = None
    description: Optional[str] = None
    no_of_days: Optional[int] = None
    budget: Optional[Decimal] = None
    departure: Optional[date] = None
    arrival: Optional[date] = None
    total_hotels: int
    total_transports: int
    total_food_plans: int
    total_hotel_cost: Decimal
    total_transport_cost: Decimal
    total_food_cost: Decimal
    calculated_total_cost: Decimal


class CatalogDetailResponse(CatalogListResponse):
    hotels: List[CatalogHotelResponse] = []
    transport: List[CatalogTransportResponse] = []
    food: List[CatalogFoodResponse] = []


class CatalogQuoteResponse(BaseModel):
    catalog_id: int
    nights: int
    total_hotel_cost: Decimal
    total_transport_cost: Decimal
    total_food_cost: Decimal
    grand_total: Decimal
