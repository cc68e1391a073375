"""Scoreboard/roster proxy client.

Provides async access to the provider proxy with:
- Retry with exponential backoff
- Error classification
- Payload normalization into CandidateEvent / RosterEntry
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx
import structlog

from gamenight.config import get_settings
from gamenight.services.availability import RosterEntry
from gamenight.services.espn_client.transform import parse_roster, transform_scoreboard
from gamenight.services.events.models import CandidateEvent

logger = structlog.get_logger(__name__)


class ProviderErrorType(Enum):
    """Classification of provider errors."""

    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_INPUT = "INVALID_INPUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    MALFORMED = "MALFORMED"
    UNKNOWN = "UNKNOWN"


class SourceDataError(Exception):
    """Provider fetch failure or unusable payload."""

    def __init__(self, message: str, error_type: ProviderErrorType, retryable: bool = False):
        super().__init__(message)
        self.error_type = error_type
        self.retryable = retryable


@dataclass
class EventFeed:
    """One scoreboard fetch."""

    events: list[CandidateEvent] = field(default_factory=list)
    fetched_at: datetime | None = None
    error: str | None = None


class EspnClient:
    """
    Scoreboard/roster proxy client.

    Use as an async context manager, or call close() when done.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        max_retries: int = 3,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.espn_proxy_url
        self.timeout = timeout or settings.request_timeout_seconds
        self.max_retries = max_retries
        self._http_client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "EspnClient":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._http_client

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        GET the proxy with retry.

        Raises:
            SourceDataError: If the request fails after retries or the
                payload is not a usable JSON object
        """
        endpoint = params.get("endpoint")

        for attempt in range(self.max_retries + 1):
            try:
                client = await self._get_client()
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()

                try:
                    data = response.json()
                except ValueError as e:
                    raise SourceDataError(
                        f"Invalid JSON from provider: {e}",
                        ProviderErrorType.MALFORMED,
                    ) from e

                if not isinstance(data, dict):
                    raise SourceDataError(
                        "Provider payload is not an object",
                        ProviderErrorType.MALFORMED,
                    )
                if data.get("error"):
                    raise SourceDataError(str(data["error"]), ProviderErrorType.UNKNOWN)
                return data

            except httpx.TimeoutException:
                if attempt < self.max_retries:
                    wait_time = 2**attempt
                    logger.warning(
                        "timeout_retrying",
                        endpoint=endpoint,
                        attempt=attempt,
                        wait_time=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                raise SourceDataError(
                    "Request timeout",
                    ProviderErrorType.TIMEOUT,
                    retryable=True,
                )

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 429 or status >= 500:
                    if attempt < self.max_retries:
                        wait_time = 2**attempt
                        logger.warning(
                            "provider_error_retrying",
                            endpoint=endpoint,
                            status_code=status,
                            attempt=attempt,
                        )
                        await asyncio.sleep(wait_time)
                        continue
                    error_type = (
                        ProviderErrorType.RATE_LIMITED
                        if status == 429
                        else ProviderErrorType.SERVICE_UNAVAILABLE
                    )
                    raise SourceDataError(f"API error: {status}", error_type, retryable=True)
                if 400 <= status < 500:
                    raise SourceDataError(
                        f"API error: {status}",
                        ProviderErrorType.INVALID_INPUT,
                        retryable=False,
                    )
                raise SourceDataError(str(e), ProviderErrorType.UNKNOWN)

            except httpx.TransportError as e:
                if attempt < self.max_retries:
                    await asyncio.sleep(2**attempt)
                    continue
                raise SourceDataError(
                    str(e) or "Network error",
                    ProviderErrorType.SERVICE_UNAVAILABLE,
                    retryable=True,
                )

        raise SourceDataError("Request failed", ProviderErrorType.UNKNOWN)

    async def fetch_events(self, category: str) -> EventFeed:
        """
        Fetch and normalize today's scoreboard for a category.

        Raises:
            SourceDataError: On fetch failure or malformed payload
        """
        data = await self._request({"sport": category.lower(), "endpoint": "scoreboard"})
        fetched_at = datetime.now(timezone.utc)
        try:
            events = transform_scoreboard(data, category)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SourceDataError(
                f"Unusable scoreboard payload: {e}",
                ProviderErrorType.MALFORMED,
            ) from e
        logger.info(
            "scoreboard_fetched",
            category=category,
            raw_events=len(data["events"]) if isinstance(data.get("events"), list) else 0,
            events=len(events),
        )
        return EventFeed(events=events, fetched_at=fetched_at)

    async def fetch_roster(self, category: str, team_code: str) -> list[RosterEntry]:
        """
        Fetch and parse one team's roster.

        Raises:
            SourceDataError: On fetch failure or malformed payload
        """
        data = await self._request(
            {"sport": category.lower(), "endpoint": "roster", "teamId": team_code}
        )
        try:
            roster = parse_roster(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SourceDataError(
                f"Unusable roster payload: {e}",
                ProviderErrorType.MALFORMED,
            ) from e
        logger.debug("roster_fetched", category=category, team=team_code, count=len(roster))
        return roster

    async def health_check(self, category: str = "nba") -> bool:
        """
        Check if the proxy is reachable.

        Returns:
            True if a scoreboard can be fetched
        """
        try:
            await self._request({"sport": category, "endpoint": "scoreboard"})
            return True
        except SourceDataError as e:
            logger.error("provider_health_check_failed", error=str(e))
            return False
