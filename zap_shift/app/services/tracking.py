"""
Tracking ledger service.

Generates tracking identifiers and appends/reads lifecycle events.
Appends are staged on the caller's session; the caller commits them
together with the parcel/rider/payment writes they describe.
"""

import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zap_shift.app.domain.parcel.lifecycle import details_for
from zap_shift.app.models.tracking_log import TrackingLog

TRACKING_PREFIX = "PRCL"


def generate_tracking_id(now: Optional[datetime] = None) -> str:
    """
    Build a tracking id like ``PRCL-20260118-3FA9C2``.
    
    The date part is the UTC generation date; the suffix is 3 random bytes.
    No uniqueness check is made here - the unique index on parcels is the
    final arbiter.
    """
    now = now or datetime.now(timezone.utc)
    return f"{TRACKING_PREFIX}-{now.strftime('%Y%m%d')}-{secrets.token_hex(3).upper()}"


def append_tracking_log(db: AsyncSession, tracking_id: str, status: str) -> TrackingLog:
    """Stage one ledger entry. Calling twice with the same status records twice."""
    entry = TrackingLog(
        tracking_id=tracking_id,
        status=status,
        details=details_for(status),
    )
    db.add(entry)
    return entry


async def list_tracking_logs(db: AsyncSession, tracking_id: str) -> List[TrackingLog]:
    """Return all entries for a tracking id in insertion order."""
    result = await db.execute(
        select(TrackingLog)
        .where(TrackingLog.tracking_id == tracking_id)
        .order_by(TrackingLog.id)
    )
    return result.scalars().all()
