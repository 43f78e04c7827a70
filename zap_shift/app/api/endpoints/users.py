"""
User API Endpoints.

Sign-in registration, search, role lookup and admin role management.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from zap_shift.app.core.dependencies import get_verified_email
from zap_shift.app.core.guards import require_admin
from zap_shift.app.db.session import get_db
from zap_shift.app.models.user import User
from zap_shift.app.schemas.user import (
    UserCreate, UserCreateResponse, UserResponse, RoleResponse, RoleUpdate
)
from zap_shift.app.services import users as user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def search_users(
    search_text: Optional[str] = Query(None, alias="searchText"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """Search users by name or email (max 5 results)."""
    users = await user_service.search_users(db, search_text)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., description="User ID"),
    email: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    user = await user_service.get_user(db, user_id)
    return UserResponse.model_validate(user)


@router.get("/{email}/role", response_model=RoleResponse)
async def get_user_role(
    email: str = Path(..., description="Account email"),
    caller: str = Depends(get_verified_email),
    db: AsyncSession = Depends(get_db)
):
    """Role for an email; unknown accounts report ``user``."""
    role = await user_service.get_role_by_email(db, email)
    return RoleResponse(role=role)


@router.post("", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a user after first sign-in.
    
    Idempotent: an already registered email returns 200 with
    ``inserted: false`` and leaves the record unchanged.
    """
    user, created = await user_service.create_user(db, user_data)
    if not created:
        response.status_code = status.HTTP_200_OK
        return UserCreateResponse(inserted=False, message="user already exists", inserted_id=user.id)

    return UserCreateResponse(inserted=True, message="user created", inserted_id=user.id)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    role_update: RoleUpdate,
    user_id: int = Path(..., description="User ID"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change a user's role (Admin only)."""
    user = await user_service.set_role(db, user_id, role_update.role, changed_by=admin.email)
    return UserResponse.model_validate(user)
