"""
Rider Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field
from zap_shift.app.models.enums import RiderStatus, WorkStatus
from zap_shift.app.schemas.common import CamelModel


class RiderCreate(CamelModel):
    """Rider application form."""
    rider_email: EmailStr
    rider_district: str = Field(..., min_length=1, max_length=100)
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    rider_region: Optional[str] = Field(None, max_length=100)
    nid: Optional[str] = Field(None, max_length=50, description="National ID number")
    bike_registration: Optional[str] = Field(None, max_length=50)


class RiderResponse(CamelModel):
    id: int
    name: Optional[str] = None
    rider_email: str
    phone: Optional[str] = None
    rider_region: Optional[str] = None
    rider_district: str
    nid: Optional[str] = None
    bike_registration: Optional[str] = None
    status: RiderStatus
    work_status: WorkStatus
    created_at: datetime


class RiderCreateResponse(CamelModel):
    inserted: bool
    message: str
    inserted_id: Optional[int] = None


class RiderApproval(CamelModel):
    """Admin decision on a rider application."""
    status: RiderStatus
    email: Optional[EmailStr] = None


class DailyDeliveries(CamelModel):
    day: str = Field(..., description="DD-MM-YYYY, UTC")
    delivered_count: int
