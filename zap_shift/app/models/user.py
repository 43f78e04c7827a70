"""
User database model.

Users are created on first sign-in and identified by their verified email.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from zap_shift.app.db.session import Base
from zap_shift.app.models.enums import UserRole
from zap_shift.app.models.utils import utcnow


class User(Base):
    """
    User model for identity and role management.
    
    Authentication itself is delegated to the identity provider; this
    record only carries profile data and the role used by the guards.
    """
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=True, index=True)
    photo_url = Column(String(1024), nullable=True)
    
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
