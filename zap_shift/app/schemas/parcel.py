"""
Parcel Pydantic schemas.

Defines request and response models for parcel management.
"""

from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional
from zap_shift.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from zap_shift.app.schemas.common import CamelModel


class ParcelCreate(CamelModel):
    """Schema for creating a new parcel."""
    sender_email: EmailStr = Field(..., description="Sender's account email")
    cost: float = Field(..., ge=0, description="Delivery cost in major currency units")
    parcel_name: Optional[str] = Field(None, max_length=255)
    parcel_type: Optional[str] = Field(None, max_length=50, description="document / non-document")
    parcel_weight: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    sender_name: Optional[str] = Field(None, max_length=255)
    sender_district: Optional[str] = Field(None, max_length=100)
    receiver_name: Optional[str] = Field(None, max_length=255)
    receiver_email: Optional[EmailStr] = None
    receiver_district: Optional[str] = Field(None, max_length=100)
    receiver_address: Optional[str] = Field(None, max_length=500)
    receiver_phone: Optional[str] = Field(None, max_length=50)


class ParcelCreatedResponse(CamelModel):
    """Insert outcome for a new parcel."""
    inserted_id: int
    tracking_id: str


class RiderAssignment(CamelModel):
    """Schema for assigning a rider to a paid parcel."""
    rider_id: int
    rider_name: Optional[str] = None
    rider_email: EmailStr
    tracking_id: Optional[str] = None


class DeliveryStatusUpdate(CamelModel):
    """Schema for moving a parcel through its lifecycle."""
    delivery_status: DeliveryStatus
    rider_id: Optional[int] = None
    tracking_id: Optional[str] = None


class ParcelResponse(CamelModel):
    """Schema for parcel response."""
    id: int
    tracking_id: str
    parcel_name: Optional[str] = None
    parcel_type: Optional[str] = None
    parcel_weight: Optional[float] = None
    sender_name: Optional[str] = None
    sender_email: str
    sender_district: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_email: Optional[str] = None
    receiver_district: Optional[str] = None
    receiver_address: Optional[str] = None
    receiver_phone: Optional[str] = None
    cost: float
    delivery_status: DeliveryStatus
    payment_status: PaymentStatus
    rider_id: Optional[int] = None
    rider_name: Optional[str] = None
    rider_email: Optional[str] = None
    created_at: datetime


class StatusCount(CamelModel):
    status: DeliveryStatus
    count: int
