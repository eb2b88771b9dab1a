"""Database engine and per-request sessions for the EduFlow schema.

Learn: One async engine per process. Repositories never open sessions
themselves; they receive the AsyncSession that get_db yields, so every
repository used by a request shares one unit of work. Nothing connects
until the first query, which is why the test suite (in-memory
repositories) can import the app without a running Postgres.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from eduflow.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=15,
)

# Rows stay readable after commit; handlers serialize them post-commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        yield session
