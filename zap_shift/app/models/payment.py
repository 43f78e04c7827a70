"""
Payment database model.

One row per completed checkout; the gateway's transaction id is the
idempotency key.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime
from zap_shift.app.db.session import Base
from zap_shift.app.models.utils import utcnow


class Payment(Base):
    __tablename__ = "payments"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    transaction_id = Column(String(255), unique=True, nullable=False, index=True)
    parcel_id = Column(Integer, nullable=False, index=True)
    parcel_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), nullable=False)
    payment_status = Column(String(50), nullable=False)
    tracking_id = Column(String(32), nullable=True, index=True)
    paid_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<Payment(id={self.id}, transaction='{self.transaction_id}', parcel_id={self.parcel_id})>"
