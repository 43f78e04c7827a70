"""
Parcel Service.

Parcel creation, listing, rider assignment and lifecycle updates.
Writes that touch more than one record (parcel + rider + tracking log)
are committed in a single transaction.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zap_shift.app.core.exceptions import ConflictError, ResourceNotFoundError
from zap_shift.app.domain.parcel.lifecycle import ensure_transition
from zap_shift.app.models.enums import RiderStatus, WorkStatus
from zap_shift.app.models.parcel import Parcel
from zap_shift.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from zap_shift.app.models.rider import Rider
from zap_shift.app.schemas.parcel import ParcelCreate, RiderAssignment, DeliveryStatusUpdate
from zap_shift.app.services.tracking import generate_tracking_id, append_tracking_log

logger = logging.getLogger(__name__)

# Attempts at drawing a fresh tracking id when the unique index rejects one
TRACKING_ID_ATTEMPTS = 3


class ParcelService:

    @staticmethod
    async def list_parcels(
        db: AsyncSession,
        sender_email: Optional[str] = None,
        delivery_status: Optional[DeliveryStatus] = None
    ) -> List[Parcel]:
        """List parcels matching all given filters, newest first."""
        query = select(Parcel)
        if sender_email:
            query = query.where(Parcel.sender_email == sender_email)
        if delivery_status:
            query = query.where(Parcel.delivery_status == delivery_status)

        result = await db.execute(query.order_by(Parcel.created_at.desc(), Parcel.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def list_for_rider(
        db: AsyncSession,
        rider_email: Optional[str] = None,
        delivery_status: Optional[DeliveryStatus] = None,
        exact_status: bool = False
    ) -> List[Parcel]:
        """
        List a rider's parcels, oldest first.

        By default only ``parcel_delivered`` is honoured as a status filter:
        any other requested status (or none) yields every not-yet-delivered
        parcel. With ``exact_status`` the requested status is matched as given.
        """
        query = select(Parcel)
        if rider_email:
            query = query.where(Parcel.rider_email == rider_email)

        if delivery_status == DeliveryStatus.PARCEL_DELIVERED or (exact_status and delivery_status):
            query = query.where(Parcel.delivery_status == delivery_status)
        else:
            query = query.where(Parcel.delivery_status.not_in([DeliveryStatus.PARCEL_DELIVERED]))

        result = await db.execute(query.order_by(Parcel.created_at.asc(), Parcel.id.asc()))
        return result.scalars().all()

    @staticmethod
    async def get_parcel(db: AsyncSession, parcel_id: int) -> Parcel:
        result = await db.execute(select(Parcel).where(Parcel.id == parcel_id))
        parcel = result.scalar_one_or_none()
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        return parcel

    @staticmethod
    async def status_stats(db: AsyncSession) -> List[Tuple[DeliveryStatus, int]]:
        """Count parcels per delivery status."""
        result = await db.execute(
            select(Parcel.delivery_status, func.count(Parcel.id))
            .group_by(Parcel.delivery_status)
        )
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def create_parcel(db: AsyncSession, data: ParcelCreate) -> Parcel:
        """
        Create a parcel in ``parcel_created`` state and open its tracking stream.

        Raises:
            ConflictError: If no free tracking id was drawn after a few attempts
        """
        for attempt in range(1, TRACKING_ID_ATTEMPTS + 1):
            tracking_id = generate_tracking_id()
            parcel = Parcel(
                **data.model_dump(),
                tracking_id=tracking_id,
                delivery_status=DeliveryStatus.PARCEL_CREATED,
                payment_status=PaymentStatus.UNPAID,
            )
            db.add(parcel)
            append_tracking_log(db, tracking_id, DeliveryStatus.PARCEL_CREATED.value)

            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.warning("Tracking id collision on %s (attempt %d)", tracking_id, attempt)
                continue

            await db.refresh(parcel)
            logger.info("Parcel %s created for %s", parcel.tracking_id, parcel.sender_email)
            return parcel

        raise ConflictError("Could not allocate a unique tracking id")

    @staticmethod
    async def assign_rider(db: AsyncSession, parcel_id: int, assignment: RiderAssignment) -> Parcel:
        """
        Assign an available, approved rider to a paid parcel.

        The parcel status, the rider's work status and the ledger entry are
        committed together. Both status writes are compare-and-set so two
        concurrent assignments cannot both claim the same rider or parcel.
        """
        parcel = await ParcelService.get_parcel(db, parcel_id)
        ensure_transition(parcel.delivery_status, DeliveryStatus.DRIVER_ASSIGNED)

        rider = await _get_rider(db, assignment.rider_id)
        if rider.status != RiderStatus.APPROVED:
            raise ConflictError("Rider is not approved", details={"rider_id": rider.id})

        claimed = await db.execute(
            update(Rider)
            .where(Rider.id == rider.id, Rider.work_status == WorkStatus.AVAILABLE)
            .values(work_status=WorkStatus.IN_DELIVERY)
        )
        if claimed.rowcount == 0:
            await db.rollback()
            raise ConflictError("Rider is already on a delivery", details={"rider_id": rider.id})

        await _set_parcel_status(
            db, parcel, DeliveryStatus.DRIVER_ASSIGNED,
            rider_id=rider.id,
            rider_name=assignment.rider_name or rider.name,
            rider_email=assignment.rider_email,
        )
        append_tracking_log(db, parcel.tracking_id, DeliveryStatus.DRIVER_ASSIGNED.value)

        await db.commit()
        await db.refresh(parcel)
        logger.info("Parcel %s assigned to rider %s", parcel.tracking_id, rider.id)
        return parcel

    @staticmethod
    async def update_status(db: AsyncSession, parcel_id: int, status_update: DeliveryStatusUpdate) -> Parcel:
        """
        Move a parcel to its next delivery status.

        ``parcel_delivered`` frees the rider. Returning to ``parcel_paid``
        (the rider declined) frees the rider and clears the assignment.
        A rider record deleted in the meantime is skipped.
        """
        parcel = await ParcelService.get_parcel(db, parcel_id)
        new_status = status_update.delivery_status
        ensure_transition(parcel.delivery_status, new_status)

        extra = {}
        if new_status in (DeliveryStatus.PARCEL_DELIVERED, DeliveryStatus.PARCEL_PAID):
            rider_id = status_update.rider_id or parcel.rider_id
            if rider_id is not None:
                result = await db.execute(select(Rider).where(Rider.id == rider_id))
                rider = result.scalar_one_or_none()
                if rider is None:
                    logger.warning("Rider %s of parcel %s no longer exists", rider_id, parcel.tracking_id)
                else:
                    rider.work_status = WorkStatus.AVAILABLE
            if new_status == DeliveryStatus.PARCEL_PAID:
                extra = {"rider_id": None, "rider_name": None, "rider_email": None}

        await _set_parcel_status(db, parcel, new_status, **extra)
        append_tracking_log(db, parcel.tracking_id, new_status.value)

        await db.commit()
        await db.refresh(parcel)
        logger.info("Parcel %s moved to %s", parcel.tracking_id, new_status.value)
        return parcel

    @staticmethod
    async def delete_parcel(db: AsyncSession, parcel_id: int) -> int:
        """Delete a parcel; its tracking log and payments are kept."""
        parcel = await ParcelService.get_parcel(db, parcel_id)
        await db.delete(parcel)
        await db.commit()
        logger.info("Parcel %s deleted", parcel.tracking_id)
        return 1


async def _get_rider(db: AsyncSession, rider_id: int) -> Rider:
    result = await db.execute(select(Rider).where(Rider.id == rider_id))
    rider = result.scalar_one_or_none()
    if rider is None:
        raise ResourceNotFoundError("Rider", rider_id)
    return rider


async def _set_parcel_status(db: AsyncSession, parcel: Parcel, new_status: DeliveryStatus, **values) -> None:
    """
    Compare-and-set the parcel's delivery status against the value read earlier.

    Raises:
        ConflictError: If another request changed the status in between
    """
    result = await db.execute(
        update(Parcel)
        .where(Parcel.id == parcel.id, Parcel.delivery_status == parcel.delivery_status)
        .values(delivery_status=new_status, **values)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ConflictError("Parcel was modified by another request", details={"parcel_id": parcel.id})
