"""
Rider Service.

Rider applications, admin approval and delivery statistics.
"""

import logging
from collections import Counter
from typing import List, Optional, Tuple

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zap_shift.app.core.exceptions import ResourceNotFoundError
from zap_shift.app.models.enums import RiderStatus, WorkStatus, UserRole
from zap_shift.app.models.parcel import Parcel
from zap_shift.app.models.parcel_enums import DeliveryStatus
from zap_shift.app.models.rider import Rider
from zap_shift.app.models.tracking_log import TrackingLog
from zap_shift.app.models.user import User
from zap_shift.app.models.utils import as_utc
from zap_shift.app.schemas.rider import RiderCreate

logger = logging.getLogger(__name__)

DAY_FORMAT = "%d-%m-%Y"


async def list_riders(
    db: AsyncSession,
    status: Optional[RiderStatus] = None,
    district: Optional[str] = None,
    work_status: Optional[WorkStatus] = None
) -> List[Rider]:
    """List riders matching all given filters, newest first."""
    query = select(Rider)
    if status:
        query = query.where(Rider.status == status)
    if district:
        query = query.where(Rider.rider_district == district)
    if work_status:
        query = query.where(Rider.work_status == work_status)

    result = await db.execute(query.order_by(Rider.created_at.desc(), Rider.id.desc()))
    return result.scalars().all()


async def get_rider(db: AsyncSession, rider_id: int) -> Rider:
    result = await db.execute(select(Rider).where(Rider.id == rider_id))
    rider = result.scalar_one_or_none()
    if rider is None:
        raise ResourceNotFoundError("Rider", rider_id)
    return rider


async def create_rider(db: AsyncSession, data: RiderCreate) -> Tuple[Rider, bool]:
    """
    Record a rider application.

    Returns:
        (rider, created) - ``created`` is False when the email already applied,
        in which case the existing record is returned untouched.
    """
    existing = await _find_by_email(db, data.rider_email)
    if existing:
        return existing, False

    rider = Rider(
        **data.model_dump(),
        status=RiderStatus.PENDING,
        work_status=WorkStatus.AVAILABLE,
    )
    db.add(rider)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent application for the same email won the insert
        await db.rollback()
        return await _find_by_email(db, data.rider_email), False

    await db.refresh(rider)
    logger.info("Rider application received from %s", rider.rider_email)
    return rider, True


async def set_approval_status(
    db: AsyncSession,
    rider_id: int,
    status: RiderStatus,
    email: Optional[str] = None
) -> Rider:
    """
    Apply an admin decision to a rider application.

    Work status is reset to available. Approval also promotes the matching
    user account to the rider role, in the same transaction.
    """
    rider = await get_rider(db, rider_id)
    rider.status = status
    rider.work_status = WorkStatus.AVAILABLE

    if status == RiderStatus.APPROVED:
        user_email = email or rider.rider_email
        result = await db.execute(select(User).where(User.email == user_email))
        user = result.scalar_one_or_none()
        if user is None:
            logger.warning("Approved rider %s has no user account for %s", rider.id, user_email)
        else:
            user.role = UserRole.RIDER

    await db.commit()
    await db.refresh(rider)
    logger.info("Rider %s set to %s", rider.id, status.value)
    return rider


async def delete_rider(db: AsyncSession, rider_id: int) -> int:
    """Delete a rider; parcels keep their denormalized rider fields."""
    rider = await get_rider(db, rider_id)
    await db.delete(rider)
    await db.commit()
    return 1


async def deliveries_per_day(db: AsyncSession, rider_email: str) -> List[Tuple[str, int]]:
    """
    Count a rider's completed deliveries per UTC calendar day.

    The day comes from the ``parcel_delivered`` tracking entry, not from
    the parcel itself.
    """
    result = await db.execute(
        select(TrackingLog.created_at)
        .join(Parcel, Parcel.tracking_id == TrackingLog.tracking_id)
        .where(and_(
            Parcel.rider_email == rider_email,
            Parcel.delivery_status == DeliveryStatus.PARCEL_DELIVERED,
            TrackingLog.status == DeliveryStatus.PARCEL_DELIVERED.value,
        ))
    )

    counts = Counter(as_utc(created_at).date() for created_at in result.scalars().all())
    return [(day.strftime(DAY_FORMAT), counts[day]) for day in sorted(counts)]


async def _find_by_email(db: AsyncSession, email: str) -> Optional[Rider]:
    result = await db.execute(select(Rider).where(Rider.rider_email == email))
    return result.scalar_one_or_none()
