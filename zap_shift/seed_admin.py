"""
Database seeding script for the first admin account.

Admins can only be promoted by another admin, so the first one is created
(or promoted) directly in the database:

    python -m zap_shift.seed_admin admin@zapshift.io "Ops Admin"
"""

import asyncio
import sys

from sqlalchemy import select

from zap_shift.app.db.session import AsyncSessionLocal, engine, Base
from zap_shift.app.models.enums import UserRole
from zap_shift.app.models.user import User


async def seed_admin(email: str, display_name: str = None):
    """
    Create an ADMIN user for ``email``, or promote the existing account.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user and user.role == UserRole.ADMIN:
            print(f"{email} is already an admin, skipping seeding")
            return

        if user:
            user.role = UserRole.ADMIN
            print(f"Promoted {email} to admin")
        else:
            db.add(User(email=email, display_name=display_name, role=UserRole.ADMIN))
            print(f"Created admin {email}")

        await db.commit()

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m zap_shift.seed_admin <email> [display name]")
        sys.exit(1)
    asyncio.run(seed_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
