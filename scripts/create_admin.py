"""
Staff account creation script

Staff log in through /api/v1/auth/admin/login with email + password.

Usage:
    python scripts/create_admin.py
    python scripts/create_admin.py --all
    python scripts/create_admin.py warden@hostel.edu secret123 "Hostel Warden"
"""
import asyncio
import logging
import sys

from sqlalchemy import select

from hostel_complaints.core.database import AsyncSessionLocal, init_db
from hostel_complaints.core.logging_config import configure_logging
from hostel_complaints.core.security import get_password_hash
from hostel_complaints.models.user import User, UserRole

logger = logging.getLogger("hostel_complaints.scripts.create_admin")

DEFAULT_USERS = [
    {
        "email": "admin@hostel.edu",
        "password": "admin123",
        "name": "Hostel Administrator",
        "role": UserRole.ADMIN,
        "room": None,
    },
    {
        "email": "warden@hostel.edu",
        "password": "warden123",
        "name": "Block A Warden",
        "role": UserRole.ADMIN,
        "room": None,
    },
    {
        "email": "student1@hostel.edu",
        "password": "student123",
        "name": "Demo Student",
        "role": UserRole.STUDENT,
        "room": "A-101",
    },
]


async def _create_user(session, email: str, password: str, name: str, role: UserRole, room=None) -> bool:
    result = await session.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing:
        logger.info(f"Skipped (exists): {email} role={existing.role.value} active={existing.is_active}")
        return False

    session.add(User(
        email=email,
        hashed_password=get_password_hash(password),
        name=name,
        room=room,
        role=role,
        is_active=True
    ))
    logger.info(f"Created: {email} ({role.value})")
    return True


async def create_admin(
    email: str = "admin@hostel.edu",
    password: str = "admin123",
    name: str = "Hostel Administrator"
):
    """Create one staff account"""
    await init_db()

    async with AsyncSessionLocal() as session:
        if await _create_user(session, email.lower(), password, name, UserRole.ADMIN):
            await session.commit()


async def create_default_users():
    """Create the demo accounts (staff and one student)"""
    await init_db()

    async with AsyncSessionLocal() as session:
        created = 0
        for user_data in DEFAULT_USERS:
            if await _create_user(session, **user_data):
                created += 1
        await session.commit()

    logger.info(f"{created} user(s) created")


if __name__ == "__main__":
    configure_logging()

    if len(sys.argv) > 1:
        if sys.argv[1] == "--all":
            asyncio.run(create_default_users())
        else:
            email = sys.argv[1]
            password = sys.argv[2] if len(sys.argv) > 2 else "admin123"
            name = sys.argv[3] if len(sys.argv) > 3 else "Admin"
            asyncio.run(create_admin(email, password, name))
    else:
        asyncio.run(create_admin())
