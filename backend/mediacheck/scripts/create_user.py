from __future__ import annotations

import asyncio

from sqlalchemy import select

from mediacheck.core.security import create_access_token
from mediacheck.db.base import Base
from mediacheck.db.session import AsyncSessionLocal, engine
from mediacheck.models import User


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app_id = input("App ID: ").strip() or "WEBSITE"
    email = input("Email: ").strip().lower() or None
    name = input("Name: ").strip() or None

    async with AsyncSessionLocal() as session:
        user = None
        if email:
            existing_result = await session.execute(select(User).where(User.email == email, User.app_id == app_id))
            user = existing_result.scalar_one_or_none()

        if user is None:
            user = User(app_id=app_id, email=email, name=name, is_active=True)
            session.add(user)
            await session.commit()
            print(f"Created user {user.id}.")
        else:
            print(f"User {user.id} already exists for this email.")

    token, expires_at = create_access_token(user.id, user.app_id)
    print(f"Access token (expires {expires_at.isoformat()}):")
    print(token)


if __name__ == "__main__":
    asyncio.run(main())
