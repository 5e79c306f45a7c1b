from pydantic import BaseModel
from decimal import Decimal


class DashboardStats(BaseModel):
    total_customers: int
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    total_catalogs: int


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    total_transactions: int
    unique_bookings: int
    unique_customers: int
    completed_revenue: Decimal
    pending_revenue: Decimal
    refunded_amount: Decimal
    package_revenue: Decimal
    custom_revenue: Decimal
