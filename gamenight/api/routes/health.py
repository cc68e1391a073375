"""Liveness and readiness endpoints."""

from datetime import datetime, timezone

import redis.asyncio as redis
import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from gamenight.api.dependencies import get_db, get_pick_service, get_redis
from gamenight.config import get_settings
from gamenight.services.espn_client import EspnClient
from gamenight.services.picks import PickService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    refreshed_categories: list[str]


class DependencyCheck(BaseModel):
    status: str  # ok / warning / error
    message: str | None = None


class ReadyResponse(BaseModel):
    ready: bool
    checks: dict[str, DependencyCheck]


@router.get("/health", response_model=HealthResponse)
async def health(service: PickService = Depends(get_pick_service)):
    """Liveness, plus which categories have been refreshed in this process."""
    refreshed = [c for c in get_settings().categories if service.last_result(c) is not None]
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        refreshed_categories=refreshed,
    )


async def _check(name: str, probe) -> DependencyCheck:
    try:
        await probe()
        return DependencyCheck(status="ok")
    except Exception as e:
        logger.warning("readiness_check_failed", dependency=name, error=str(e))
        return DependencyCheck(status="error", message=str(e))


@router.get("/ready", response_model=ReadyResponse)
async def ready(
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
):
    """
    Readiness of everything a refresh needs.

    The database and Redis gate readiness. The scoreboard proxy and the remote
    error log only produce warnings, since a refresh degrades gracefully
    without them.
    """
    checks = {
        "db": await _check("db", lambda: db.execute(text("SELECT 1"))),
        "redis": await _check("redis", redis_client.ping),
    }

    settings = get_settings()
    async with EspnClient(max_retries=0) as client:
        provider_up = await client.health_check(settings.categories[0] if settings.categories else "nba")
    checks["provider"] = (
        DependencyCheck(status="ok")
        if provider_up
        else DependencyCheck(status="warning", message="Scoreboard proxy unreachable")
    )

    if settings.error_log_configured:
        checks["error_log"] = DependencyCheck(status="ok", message="Remote error log configured")
    else:
        checks["error_log"] = DependencyCheck(status="warning", message="Logging locally only")

    return ReadyResponse(
        ready=all(c.status != "error" for c in checks.values()),
        checks=checks,
    )
