from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal


# ============ Line item input ============

class HotelItemCreate(BaseModel):
    hotel_id: int
    rooms_booked: int = Field(default=1, ge=1)
    check_in: date
    check_out: date


class TransportItemCreate(BaseModel):
    transport_id: int
    seats_booked: int = Field(default=1, ge=1)
    travel_date: date


class FoodItemCreate(BaseModel):
    food_id: int
    quantity: int = Field(default=1, ge=1)


# ============ Booking creation ============

class CatalogBookingCreate(BaseModel):
    customer_id: int
    catalog_id: int
    booking_description: Optional[str] = Field(None, max_length=1000)
    check_in: date
    check_out: date
    travel_date: date


class CustomBookingCreate(BaseModel):
    customer_id: int
    booking_description: Optional[str] = Field(None, max_length=1000)
    hotels: List[HotelItemCreate] = Field(default_factory=list)
    transport: List[TransportItemCreate] = Field(default_factory=list)
    food: List[FoodItemCreate] = Field(default_factory=list)


class BookingCreatedResponse(BaseModel):
    message: str
    booking_id: str
    total_cost: Decimal


# ============ Status changes ============

class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: str
    status: str
    refund_issued: bool


class BookingStatusUpdate(BaseModel):
    # Plain string so an unknown value surfaces as INVALID_STATUS rather than a 422
    status: str


# ============ Read views ============

class BookingHotelResponse(BaseModel):
    hotel_id: int
    hotel_name: str
    hotel_address: Optional[str] = None
    rent: Decimal
    rooms_booked: int
    check_in: date
    check_out: date
    nights: int
    total_cost: Decimal


class BookingTransportResponse(BaseModel):
    transport_id: int
    type: str
    fare: Decimal
    seats_booked: int
    travel_date: date
    total_cost: Decimal


class BookingFoodResponse(BaseModel):
    food_id: int
    meals: str
    price: Decimal
    quantity: int
    total_cost: Decimal


class BookingPaymentResponse(BaseModel):
    payment_id: str
    amount: Decimal
    payment_date: datetime
    method: str
    status: str
    transaction_id: Optional[str] = None


class BookingListResponse(BaseModel):
    booking_id: str
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    catalog_id: Optional[int] = None
    package_name: Optional[str] = None
    destination: Optional[str] = None
    is_custom: bool
    booking_type: str
    booking_description: Optional[str] = None
    booking_date: datetime
    status: str
    total_hotel_cost: Decimal
    total_transport_cost: Decimal
    total_food_cost: Decimal
    grand_total: Decimal
    payment_status: Optional[str] = None
    paid_amount: Optional[Decimal] = None


class BookingDetailResponse(BookingListResponse):
    customer_phone: Optional[str] = None
    hotels: List[BookingHotelResponse] = []
    transport: List[BookingTransportResponse] = []
    food: List[BookingFoodResponse] = []
    payment: Optional[BookingPaymentResponse] = None
