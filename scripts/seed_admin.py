"""Create tables and seed the default admin account."""

import asyncio

from sqlalchemy import select

from journey_forward.admin.auth import hash_password
from journey_forward.config import settings
from journey_forward.database import create_engine, create_session_factory
from journey_forward.models import Admin, Base

DEFAULT_ADMIN = {
    "username": "admin",
    "email": "admin@journeyforward.ca",
    "password": "admin123",
}


async def seed():
    """Create all tables, then add the default admin if missing."""
    engine = create_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = create_session_factory(engine)

    async with session_factory() as session:
        result = await session.execute(
            select(Admin).where(Admin.username == DEFAULT_ADMIN["username"])
        )
        if result.scalar_one_or_none():
            print(f"  = Admin already exists: {DEFAULT_ADMIN['username']}")
        else:
            session.add(
                Admin(
                    username=DEFAULT_ADMIN["username"],
                    email=DEFAULT_ADMIN["email"],
                    password_hash=hash_password(
                        DEFAULT_ADMIN["password"], rounds=settings.bcrypt_rounds
                    ),
                )
            )
            await session.commit()
            print(f"  + Admin: {DEFAULT_ADMIN['username']} (change the password after first login)")

    await engine.dispose()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(seed())
