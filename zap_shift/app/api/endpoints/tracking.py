"""
Tracking API Endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from zap_shift.app.db.session import get_db
from zap_shift.app.schemas.tracking import TrackingLogResponse
from zap_shift.app.services.tracking import list_tracking_logs

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.get("/{tracking_id}/logs", response_model=List[TrackingLogResponse])
async def get_tracking_logs(
    tracking_id: str = Path(..., description="Parcel tracking id"),
    db: AsyncSession = Depends(get_db)
):
    """Lifecycle events for a tracking id, in the order they happened."""
    logs = await list_tracking_logs(db, tracking_id)
    return [TrackingLogResponse.model_validate(entry) for entry in logs]
