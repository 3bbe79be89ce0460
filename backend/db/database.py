from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


class Base(DeclarativeBase):
    pass


engine = create_async_engine(settings.database_url, echo=settings.database_echo)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit unit of work: everything done on `session` inside the block is
    committed together, or rolled back together if anything raises.

    The session may already be in an autobegun transaction (the auth
    dependency reads the user through the same session), so we don't call
    `session.begin()`; we commit/rollback that transaction instead.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
