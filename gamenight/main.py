"""Gamenight FastAPI application.

Watchability scoring and the daily "tonight's pick" for each category.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from gamenight import __version__
from gamenight.api.dependencies import get_pick_service
from gamenight.api.routes import health, picks
from gamenight.config import get_settings

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "starting_gamenight",
        version=__version__,
        categories=settings.categories,
        reference_timezone=settings.reference_timezone,
    )
    yield
    # The shared scoreboard client holds an httpx pool
    source = get_pick_service().source
    if hasattr(source, "close"):
        await source.close()
    logger.info("shutting_down_gamenight")


app = FastAPI(
    title="Gamenight",
    description="Watchability scoring and tonight's pick",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(picks.router)
