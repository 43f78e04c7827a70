"""
User Pydantic schemas.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import EmailStr, Field
from zap_shift.app.models.enums import UserRole
from zap_shift.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Profile sent by the client after first sign-in."""
    email: EmailStr
    display_name: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = Field(None, alias="photoURL", max_length=1024)


class UserResponse(CamelModel):
    id: int
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    role: UserRole
    created_at: datetime


class UserCreateResponse(CamelModel):
    """Insert outcome; ``inserted`` is False when the email was already registered."""
    inserted: bool
    message: str
    inserted_id: Optional[int] = None


class RoleResponse(CamelModel):
    role: UserRole


class RoleUpdate(CamelModel):
    role: UserRole


UserList = List[UserResponse]
