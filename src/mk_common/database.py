"""Async engine and session plumbing for the listing and order stores.

Queries are raw `text()` SQL in the repositories; the declarative Base only
carries the ORM mirrors under */infrastructure/db_models.py. Each request
gets its own AsyncSession so one order mutation is one transaction.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Shared declarative base for the listing and order ORM mappings."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Per-request AsyncSession for the order and listing routers.

    Application services commit or roll back explicitly; whatever is still
    uncommitted when the request ends is rolled back on close.
    """
    async with async_session_factory() as session:
        yield session
