"""
User and rider enumerations.

Defines the role and availability types for the delivery platform.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.
    
    Roles:
        USER: Sender / customer (default role on first sign-in)
        ADMIN: Manages users, riders and parcel assignment
        RIDER: Approved delivery rider
    """
    USER = "user"
    ADMIN = "admin"
    RIDER = "rider"


class RiderStatus(str, enum.Enum):
    """Rider application status. New applications start as PENDING."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkStatus(str, enum.Enum):
    """Rider availability. A rider carries at most one active delivery."""
    AVAILABLE = "available"
    IN_DELIVERY = "in_delivery"
