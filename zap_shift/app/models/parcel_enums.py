"""
Parcel status enumerations.
"""

import enum


class DeliveryStatus(str, enum.Enum):
    """
    Parcel delivery status enumeration.
    
    Status flow:
        PARCEL_CREATED → PARCEL_PAID → DRIVER_ASSIGNED → RIDER_ARRIVING
            → PARCEL_PICKED_UP → PARCEL_DELIVERED
        DRIVER_ASSIGNED → PARCEL_PAID when the rider rejects the assignment
    """
    PARCEL_CREATED = "parcel_created"
    PARCEL_PAID = "parcel_paid"
    DRIVER_ASSIGNED = "driver_assigned"
    RIDER_ARRIVING = "rider_arriving"
    PARCEL_PICKED_UP = "parcel_picked_up"
    PARCEL_DELIVERED = "parcel_delivered"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"
