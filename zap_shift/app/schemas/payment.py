"""
Payment Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field
from zap_shift.app.schemas.common import CamelModel


class CheckoutSessionCreate(CamelModel):
    """Data needed to open a hosted checkout page for a parcel."""
    parcel_id: int
    parcel_name: Optional[str] = Field(None, max_length=255)
    cost: float = Field(..., gt=0, description="Amount in major currency units")
    sender_email: Optional[EmailStr] = None
    tracking_id: Optional[str] = None


class CheckoutSessionResponse(CamelModel):
    url: str


class PaymentResponse(CamelModel):
    id: int
    transaction_id: str
    parcel_id: int
    parcel_name: Optional[str] = None
    customer_email: str
    amount: float
    currency: str
    payment_status: str
    tracking_id: Optional[str] = None
    paid_at: datetime


class PaymentSuccessResponse(CamelModel):
    """
    Outcome of reconciling a checkout session.
    
    ``newly_created`` is True only for the call that recorded the payment;
    replays return the stored record with ``newly_created`` False.
    """
    success: bool
    message: Optional[str] = None
    newly_created: bool = False
    transaction_id: Optional[str] = None
    tracking_id: Optional[str] = None
    payment: Optional[PaymentResponse] = None
