"""FastAPI dependencies for Gamenight."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from functools import lru_cache

import redis.asyncio as redis
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from gamenight.config import get_settings
from gamenight.models.base import app_session_factory
from gamenight.services.availability import AvailabilityCache
from gamenight.services.espn_client import EspnClient
from gamenight.services.picks import PickService, RedisPickStateStore
from gamenight.services.scoring import get_profile


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with app_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_redis() -> AsyncGenerator[redis.Redis, None]:
    """Get Redis client dependency."""
    settings = get_settings()
    client = redis.from_url(settings.redis_url)
    try:
        yield client
    finally:
        await client.aclose()


@lru_cache
def get_availability_cache() -> AvailabilityCache:
    """Process-wide availability table shared by every refresh."""
    settings = get_settings()
    return AvailabilityCache(ttl=timedelta(hours=settings.availability_ttl_hours))


@lru_cache
def get_pick_service() -> PickService:
    """
    Process-wide pick service.

    Holds the per-category refresh locks and last results, so it must outlive
    individual requests.
    """
    settings = get_settings()
    store = RedisPickStateStore(
        redis.from_url(settings.redis_url),
        ttl_seconds=settings.pick_state_ttl_seconds,
    )
    return PickService(
        source=EspnClient(),
        store=store,
        availability=get_availability_cache(),
    )


def valid_category(category: str) -> str:
    """Path dependency: configured, supported category or 404."""
    settings = get_settings()
    normalized = category.lower()
    if normalized not in settings.categories or get_profile(normalized) is None:
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
    return normalized
