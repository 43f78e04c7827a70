"""
Parcel API Endpoints.

Parcel creation, listing, rider assignment and delivery status updates.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from zap_shift.app.core.dependencies import get_verified_email
from zap_shift.app.core.guards import require_rider
from zap_shift.app.db.session import get_db
from zap_shift.app.models.parcel_enums import DeliveryStatus
from zap_shift.app.models.user import User
from zap_shift.app.schemas.common import DeleteResponse
from zap_shift.app.schemas.parcel import (
    ParcelCreate, ParcelCreatedResponse, ParcelResponse,
    RiderAssignment, DeliveryStatusUpdate, StatusCount
)
from zap_shift.app.services.parcels import ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.get("", response_model=List[ParcelResponse])
async def list_parcels(
    sender_email: Optional[str] = Query(None, alias="senderEmail"),
    delivery_status: Optional[DeliveryStatus] = Query(None, alias="deliveryStatus"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """
    List parcels, newest first.
    
    Optional filters are AND-ed together.
    """
    parcels = await ParcelService.list_parcels(db, sender_email, delivery_status)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.get("/rider", response_model=List[ParcelResponse])
async def list_rider_parcels(
    rider_email: Optional[str] = Query(None, alias="riderEmail"),
    delivery_status: Optional[DeliveryStatus] = Query(None, alias="deliveryStatus"),
    exact_status: bool = Query(False, alias="exactStatus", description="Match deliveryStatus exactly"),
    rider: User = Depends(require_rider),
    db: AsyncSession = Depends(get_db)
):
    """
    List parcels assigned to a rider, oldest first (Rider only).
    
    Delivered parcels are excluded unless ``deliveryStatus=parcel_delivered``.
    Other status values are ignored unless ``exactStatus=true``.
    Defaults to the calling rider's own parcels.
    """
    parcels = await ParcelService.list_for_rider(
        db,
        rider_email=rider_email or rider.email,
        delivery_status=delivery_status,
        exact_status=exact_status,
    )
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.get("/delivery-status/stats", response_model=List[StatusCount])
async def delivery_status_stats(db: AsyncSession = Depends(get_db)):
    """Count parcels per delivery status."""
    stats = await ParcelService.status_stats(db)
    return [StatusCount(status=s, count=c) for s, c in stats]


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    parcel = await ParcelService.get_parcel(db, parcel_id)
    return ParcelResponse.model_validate(parcel)


@router.post("", response_model=ParcelCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new parcel.
    
    The parcel starts as ``parcel_created`` with a freshly generated tracking id.
    """
    parcel = await ParcelService.create_parcel(db, parcel_data)
    return ParcelCreatedResponse(inserted_id=parcel.id, tracking_id=parcel.tracking_id)


@router.patch("/{parcel_id}", response_model=ParcelResponse)
async def assign_rider(
    assignment: RiderAssignment,
    parcel_id: int = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Assign a rider to a paid parcel.
    
    Marks the rider as in delivery and logs ``driver_assigned``.
    """
    parcel = await ParcelService.assign_rider(db, parcel_id, assignment)
    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}/status", response_model=ParcelResponse)
async def update_delivery_status(
    status_update: DeliveryStatusUpdate,
    parcel_id: int = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a parcel to its next delivery status.
    
    Illegal transitions are rejected with 409.
    """
    parcel = await ParcelService.update_status(db, parcel_id, status_update)
    return ParcelResponse.model_validate(parcel)


@router.delete("/{parcel_id}", response_model=DeleteResponse)
async def delete_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    deleted = await ParcelService.delete_parcel(db, parcel_id)
    return DeleteResponse(deleted_count=deleted)
