"""
Rider database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from zap_shift.app.db.session import Base
from zap_shift.app.models.enums import RiderStatus, WorkStatus
from zap_shift.app.models.utils import utcnow


class Rider(Base):
    """
    Rider application and availability record.
    
    Created as PENDING by the applicant; an admin approves or rejects it.
    """
    __tablename__ = "riders"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    rider_email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    rider_region = Column(String(100), nullable=True)
    rider_district = Column(String(100), nullable=False, index=True)
    nid = Column(String(50), nullable=True)
    bike_registration = Column(String(50), nullable=True)
    
    status = Column(Enum(RiderStatus), default=RiderStatus.PENDING, nullable=False, index=True)
    work_status = Column(Enum(WorkStatus), default=WorkStatus.AVAILABLE, nullable=False, index=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.rider_email}', status='{self.status.value}')>"
