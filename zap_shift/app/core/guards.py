"""
Security guards for role-based access control.

Role guards run after token verification and resolve the caller's User record.
"""

import logging
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from zap_shift.app.core.dependencies import get_verified_email
from zap_shift.app.core.exceptions import InsufficientPermissionsError
from zap_shift.app.db.session import get_db
from zap_shift.app.models.enums import UserRole
from zap_shift.app.models.user import User

logger = logging.getLogger(__name__)


def require_role(required_role: UserRole):
    """
    Dependency factory for role-based access control.
    
    Usage:
        @router.patch("/users/{user_id}/role")
        async def set_role(admin: User = Depends(require_role(UserRole.ADMIN))):
            ...
    
    Args:
        required_role: Role the caller's User record must carry
        
    Returns:
        FastAPI dependency yielding the caller's User record
        
    Raises:
        InsufficientPermissionsError 403 if the user is unknown or has another role
    """
    async def role_checker(
        email: str = Depends(get_verified_email),
        db: AsyncSession = Depends(get_db)
    ) -> User:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        
        if user is None or user.role != required_role:
            logger.warning("Denied %s access to %s", required_role.value, email)
            raise InsufficientPermissionsError(
                details={"required_role": required_role.value}
            )
        
        return user
    
    return role_checker


require_admin = require_role(UserRole.ADMIN)
require_rider = require_role(UserRole.RIDER)
