"""
Parcel database model.

Senders create parcels; admins assign riders; riders move them to delivery.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from zap_shift.app.db.session import Base
from zap_shift.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from zap_shift.app.models.utils import utcnow


class Parcel(Base):
    """
    Parcel model for the delivery platform.
    
    Each parcel owns a tracking id naming its event stream in the
    tracking ledger. Rider fields stay null until assignment.
    """
    __tablename__ = "parcels"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Parcel identification
    tracking_id = Column(String(32), unique=True, nullable=False, index=True)
    parcel_name = Column(String(255), nullable=True)
    parcel_type = Column(String(50), nullable=True)
    parcel_weight = Column(Float, nullable=True)
    
    # Sender
    sender_name = Column(String(255), nullable=True)
    sender_email = Column(String(255), nullable=False, index=True)
    sender_district = Column(String(100), nullable=True)
    
    # Receiver
    receiver_name = Column(String(255), nullable=True)
    receiver_email = Column(String(255), nullable=True)
    receiver_district = Column(String(100), nullable=True)
    receiver_address = Column(String(500), nullable=True)
    receiver_phone = Column(String(50), nullable=True)
    
    cost = Column(Float, nullable=False)
    
    # Status
    delivery_status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PARCEL_CREATED, nullable=False, index=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False)
    
    # Assignment - no foreign key, rider deletion leaves these in place
    rider_id = Column(Integer, nullable=True, index=True)
    rider_name = Column(String(255), nullable=True)
    rider_email = Column(String(255), nullable=True, index=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking='{self.tracking_id}', status='{self.delivery_status.value}')>"
