"""
Tracking Log Database Model.

Append-only ledger of parcel lifecycle events, keyed by tracking id.
"""

from sqlalchemy import Column, Integer, String, DateTime
from zap_shift.app.db.session import Base
from zap_shift.app.models.utils import utcnow


class TrackingLog(Base):
    """
    One entry per lifecycle event. Entries are never updated or deleted,
    and deleting a parcel leaves its entries behind.
    """
    __tablename__ = "tracking_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(32), nullable=False, index=True)
    status = Column(String(50), nullable=False)
    details = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    
    def __repr__(self):
        return f"<TrackingLog(id={self.id}, tracking='{self.tracking_id}', status='{self.status}')>"
