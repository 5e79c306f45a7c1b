from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ProcessPaymentRequest(BaseModel):
    booking_id: str
    # Validated by the service so an unknown method is reported as INVALID_METHOD
    payment_method: str = Field(..., description="credit_card | debit_card | paypal | bank_transfer")
    transaction_id: Optional[str] = Field(None, max_length=100)


class ProcessPaymentResponse(BaseModel):
    message: str
    payment_id: str
    amount: Decimal


class CompletePaymentRequest(BaseModel):
    transaction_id: Optional[str] = Field(None, max_length=100)


class PaymentStatusUpdate(BaseModel):
    status: str
    transaction_id: Optional[str] = Field(None, max_length=100)


class PaymentResponse(BaseModel):
    payment_id: str
    booking_id: str
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    amount: Decimal
    payment_date: datetime
    method: str
    status: str
    transaction_id: Optional[str] = None
    booking_status: Optional[str] = None
