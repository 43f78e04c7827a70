"""
Rider API Endpoints.

Rider applications, admin approval and delivery statistics.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from zap_shift.app.core.dependencies import get_verified_email
from zap_shift.app.core.exceptions import InsufficientPermissionsError
from zap_shift.app.core.guards import require_admin, require_rider
from zap_shift.app.db.session import get_db
from zap_shift.app.models.enums import RiderStatus, WorkStatus
from zap_shift.app.models.user import User
from zap_shift.app.schemas.common import DeleteResponse
from zap_shift.app.schemas.rider import (
    RiderCreate, RiderCreateResponse, RiderResponse, RiderApproval, DailyDeliveries
)
from zap_shift.app.services import riders as rider_service

router = APIRouter(prefix="/riders", tags=["Riders"])


@router.get("", response_model=List[RiderResponse])
async def list_riders(
    rider_status: Optional[RiderStatus] = Query(None, alias="status"),
    district: Optional[str] = Query(None),
    work_status: Optional[WorkStatus] = Query(None, alias="workStatus"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """List riders, newest first. Filters are AND-ed."""
    riders = await rider_service.list_riders(db, rider_status, district, work_status)
    return [RiderResponse.model_validate(r) for r in riders]


@router.get("/delivery-per-day", response_model=List[DailyDeliveries])
async def deliveries_per_day(
    email: Optional[str] = Query(None, description="Rider email, defaults to the caller"),
    rider: User = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """Delivered parcel counts per day for the calling rider (Rider only)."""
    if email and email != rider.email:
        raise InsufficientPermissionsError("Forbidden access")

    counts = await rider_service.deliveries_per_day(db, rider.email)
    return [DailyDeliveries(day=day, delivered_count=count) for day, count in counts]


@router.get("/{rider_id}", response_model=RiderResponse)
async def get_rider(
    rider_id: int = Path(..., description="Rider ID"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    rider = await rider_service.get_rider(db, rider_id)
    return RiderResponse.model_validate(rider)


@router.post("", response_model=RiderCreateResponse, status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    rider_data: RiderCreate,
    response: Response,
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a rider application (status ``pending``).
    
    A second application for the same email returns 200 with ``inserted: false``.
    """
    rider, created = await rider_service.create_rider(db, rider_data)
    if not created:
        response.status_code = status.HTTP_200_OK
        return RiderCreateResponse(inserted=False, message="rider already exists", inserted_id=rider.id)

    return RiderCreateResponse(inserted=True, message="rider application received", inserted_id=rider.id)


@router.patch("/{rider_id}", response_model=RiderResponse)
async def set_rider_status(
    approval: RiderApproval,
    rider_id: int = Path(..., description="Rider ID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Approve or reject a rider application (Admin only).
    
    Approval promotes the matching user account to the rider role.
    """
    rider = await rider_service.set_approval_status(db, rider_id, approval.status, approval.email)
    return RiderResponse.model_validate(rider)


@router.delete("/{rider_id}", response_model=DeleteResponse)
async def delete_rider(
    rider_id: int = Path(..., description="Rider ID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    deleted = await rider_service.delete_rider(db, rider_id)
    return DeleteResponse(deleted_count=deleted)
