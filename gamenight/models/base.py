"""Database engine and sessions for the audit tables.

The web app shares one lazily created engine. Celery task runs each get a
private engine bound to their own event loop.
"""

from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from gamenight.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for job and audit rows."""


def make_engine() -> AsyncEngine:
    """New async engine from settings, bound to whichever loop first uses it."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.debug,
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


@lru_cache
def app_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory on the web app's shared engine."""
    return make_session_factory(make_engine())


@asynccontextmanager
async def get_task_session():
    """
    Session for one Celery task run.

    The engine is disposed on exit so no pooled connection outlives the
    task's event loop.
    """
    task_engine = make_engine()
    try:
        async with make_session_factory(task_engine)() as session:
            yield session
    finally:
        await task_engine.dispose()
