"""
Parcel Lifecycle.

Transition table for a parcel's delivery status. Every handler that writes
``Parcel.delivery_status`` goes through ``ensure_transition`` first.
"""

from typing import Dict, FrozenSet, List

from zap_shift.app.core.exceptions import InvalidStatusTransitionError
from zap_shift.app.models.parcel_enums import DeliveryStatus


ALLOWED_TRANSITIONS: Dict[DeliveryStatus, FrozenSet[DeliveryStatus]] = {
    DeliveryStatus.PARCEL_CREATED: frozenset({DeliveryStatus.PARCEL_PAID}),
    DeliveryStatus.PARCEL_PAID: frozenset({DeliveryStatus.DRIVER_ASSIGNED}),
    DeliveryStatus.DRIVER_ASSIGNED: frozenset({
        DeliveryStatus.RIDER_ARRIVING,
        DeliveryStatus.PARCEL_PAID,  # rider rejected the assignment
    }),
    DeliveryStatus.RIDER_ARRIVING: frozenset({DeliveryStatus.PARCEL_PICKED_UP}),
    DeliveryStatus.PARCEL_PICKED_UP: frozenset({DeliveryStatus.PARCEL_DELIVERED}),
    DeliveryStatus.PARCEL_DELIVERED: frozenset(),
}


def allowed_next(current: DeliveryStatus) -> List[DeliveryStatus]:
    return sorted(ALLOWED_TRANSITIONS.get(current, frozenset()), key=lambda s: s.value)


def can_transition(current: DeliveryStatus, requested: DeliveryStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: DeliveryStatus, requested: DeliveryStatus) -> None:
    """
    Validate a status change.
    
    Raises:
        InvalidStatusTransitionError: If ``requested`` is not reachable from ``current``
    """
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(
            current=current.value,
            requested=requested.value,
            allowed=[s.value for s in allowed_next(current)],
        )


def details_for(status: str) -> str:
    """Human readable ledger text for a status token."""
    return status.replace("_", " ")
