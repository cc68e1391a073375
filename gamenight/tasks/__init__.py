"""Celery app and beat schedule.

Beat runs in the reference timezone so the reset-hour refresh lands on the
local pick-day boundary.
"""

from celery import Celery
from celery.schedules import crontab

from gamenight.config import get_settings

settings = get_settings()

celery_app = Celery(
    "gamenight",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["gamenight.tasks.picks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.reference_timezone,
    enable_utc=True,
    task_track_started=True,
    result_expires=3600,
    # One refresh at a time; pick state is last-writer-wins
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
)

celery_app.conf.beat_schedule = {
    "refresh-picks": {
        "task": "gamenight.tasks.picks.refresh_picks",
        "schedule": float(settings.refresh_interval_seconds),
        "options": {"expires": max(settings.refresh_interval_seconds - 20, 30)},
    },
    # First refresh of the new pick day
    "refresh-picks-daily-reset": {
        "task": "gamenight.tasks.picks.refresh_picks",
        "schedule": crontab(hour=settings.daily_reset_hour, minute=0),
        "options": {"expires": 240},
    },
}
