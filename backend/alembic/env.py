from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy.engine import Connection

from mediacheck.core.config import get_settings
from mediacheck.db.base import Base
from mediacheck.db.session import build_engine

target_metadata = Base.metadata


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = build_engine(get_settings().database_url)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


asyncio.run(run_migrations_online())
