"""Pick refresh task.

Runs the refresh pipeline for every configured category, persists pick state
to Redis and writes an audit row for every transition that changed or locked
a pick.
"""

from datetime import datetime, timedelta, timezone

import redis.asyncio as redis
import structlog

from gamenight.config import get_settings
from gamenight.models.base import get_task_session
from gamenight.models.domain import JobRun, PickTransition
from gamenight.services.availability import AvailabilityCache
from gamenight.services.espn_client import EspnClient
from gamenight.services.picks import PickService, RedisPickStateStore, RefreshResult, TransitionKind
from gamenight.tasks import celery_app

logger = structlog.get_logger(__name__)

settings = get_settings()

# Worker-wide availability table, kept across task runs
availability_cache = AvailabilityCache(ttl=timedelta(hours=settings.availability_ttl_hours))

AUDITED_KINDS = frozenset(
    {
        TransitionKind.NEW_PICK,
        TransitionKind.REEVALUATED,
        TransitionKind.LOCKED,
        TransitionKind.OVERRIDDEN,
    }
)


@celery_app.task(bind=True, soft_time_limit=210, time_limit=240)
def refresh_picks(self, categories: list[str] | None = None):
    """
    Scheduled: Every 5 minutes
    Timeout: 4 minutes

    For each category:
    1. Fetch scoreboard and stale rosters
    2. Score, rank and tier the events
    3. Advance the pick state machine and persist to Redis
    4. Record pick transitions for audit
    """
    import asyncio

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(_refresh_picks_async(self, categories))
    finally:
        loop.close()


def transition_row(result: RefreshResult) -> PickTransition | None:
    """Audit row for a refresh result, or None when nothing notable happened."""
    transition = result.transition
    if transition is None or transition.kind not in AUDITED_KINDS:
        return None
    state = transition.state
    return PickTransition(
        category=result.category,
        pick_date=state.pick_date if state else "",
        kind=transition.kind.value,
        previous_event_id=transition.previous_event_id,
        event_id=state.event_id if state else None,
        reason=transition.reason,
        message=transition.message,
        score=state.score if state else None,
        tier=state.tier.value if state else None,
    )


async def _refresh_picks_async(task, categories: list[str] | None = None):
    """Async implementation of the pick refresh."""
    started_at = datetime.now(timezone.utc)
    categories = categories or settings.categories
    job_status = "running"
    error_message = None
    stats = {
        "categories": 0,
        "events": 0,
        "transitions": 0,
        "errors": 0,
    }

    async with get_task_session() as session:
        # Create job run record
        job_run = JobRun(
            job_name="refresh_picks",
            started_at=started_at,
            status="running",
        )
        session.add(job_run)
        await session.commit()

        redis_client = redis.from_url(settings.redis_url)
        try:
            store = RedisPickStateStore(redis_client, settings.pick_state_ttl_seconds)
            async with EspnClient() as client:
                service = PickService(
                    source=client,
                    store=store,
                    availability=availability_cache,
                )
                for category in categories:
                    result = await service.refresh(category)
                    stats["categories"] += 1
                    stats["events"] += len(result.ranked_events)
                    if result.error:
                        stats["errors"] += 1

                    row = transition_row(result)
                    if row is not None:
                        session.add(row)
                        stats["transitions"] += 1

            await session.commit()
            job_status = "success"

            logger.info(
                "refresh_picks_complete",
                categories=stats["categories"],
                events=stats["events"],
                transitions=stats["transitions"],
                duration_seconds=(datetime.now(timezone.utc) - started_at).total_seconds(),
            )

        except Exception as e:
            job_status = "failed"
            error_message = str(e)
            await session.rollback()
            logger.error(
                "refresh_picks_failed",
                error=str(e),
                task_id=task.request.id,
            )

        finally:
            await redis_client.aclose()
            # Update job run record
            job_run.completed_at = datetime.now(timezone.utc)
            job_run.status = job_status
            job_run.error_message = error_message
            job_run.records_processed = stats["events"]
            job_run.job_metadata = stats
            await session.commit()

    return stats
