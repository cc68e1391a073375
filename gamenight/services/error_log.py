"""Fire-and-forget error/issue reporting.

Every report goes to structlog. When an error log endpoint is configured and
an event loop is running, the report is also POSTed in the background.
Reporting must never raise into the caller.
"""

import asyncio
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

import httpx
import structlog

from gamenight.config import get_settings

logger = structlog.get_logger(__name__)


class ErrorReporter:
    """Logging sink accepting (error-or-message, context) pairs."""

    def __init__(self, endpoint: str | None = None, timeout: float = 5.0):
        self.endpoint = endpoint or None
        self.timeout = timeout
        self._pending: set[asyncio.Task] = set()

    def report(self, error: BaseException | str, context: dict[str, Any] | None = None) -> None:
        """Record an error or warning. Never raises."""
        try:
            payload = {
                "message": str(error),
                "error_type": type(error).__name__ if isinstance(error, BaseException) else None,
                "context": context or {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            logger.warning(
                "issue_reported",
                message=payload["message"],
                error_type=payload["error_type"],
                context=payload["context"],
            )
            if self.endpoint:
                self._schedule(payload)
        except Exception as e:  # reporting is best-effort
            logger.debug("issue_report_failed", error=str(e))

    def _schedule(self, payload: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._post(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                await client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            logger.debug("remote_error_log_failed", error=str(e))


@lru_cache
def get_error_reporter() -> ErrorReporter:
    """Process-wide reporter configured from settings."""
    settings = get_settings()
    return ErrorReporter(endpoint=settings.error_log_url or None)
