"""Pick state persistence.

One JSON blob per category. Writes are last-writer-wins; refreshes for a
category are serialized by the caller.
"""

import json
from abc import ABC, abstractmethod

import redis.asyncio as redis
import structlog

from gamenight.services.picks.state import PickState, PickStateError

logger = structlog.get_logger(__name__)


def _decode(category: str, raw: str | bytes | None) -> PickState | None:
    """Parse a stored blob. Corrupt data is logged and treated as absent."""
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise PickStateError("Pick state blob is not an object")
        return PickState.from_dict(data)
    except (json.JSONDecodeError, PickStateError) as e:
        logger.warning("pick_state_corrupt", category=category, error=str(e))
        return None


class PickStateStore(ABC):
    """Key-value persistence for PickState."""

    @abstractmethod
    async def load(self, category: str) -> PickState | None:
        """Persisted state for a category, or None."""

    @abstractmethod
    async def save(self, state: PickState) -> None:
        """Replace the persisted state for state.category."""

    @abstractmethod
    async def delete(self, category: str) -> None:
        """Clear the persisted state for a category."""


class RedisPickStateStore(PickStateStore):
    """PickState blobs in Redis under gamenight:pick_state:{category}."""

    KEY_PREFIX = "gamenight:pick_state:"

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 172800):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def key(self, category: str) -> str:
        return f"{self.KEY_PREFIX}{category.lower()}"

    async def load(self, category: str) -> PickState | None:
        raw = await self.redis.get(self.key(category))
        return _decode(category, raw)

    async def save(self, state: PickState) -> None:
        await self.redis.set(
            self.key(state.category),
            json.dumps(state.to_dict()),
            ex=self.ttl_seconds,
        )

    async def delete(self, category: str) -> None:
        await self.redis.delete(self.key(category))


class MemoryPickStateStore(PickStateStore):
    """In-process store. Keeps serialized blobs so round-trips match Redis."""

    def __init__(self):
        self._blobs: dict[str, str] = {}

    async def load(self, category: str) -> PickState | None:
        return _decode(category, self._blobs.get(category.lower()))

    async def save(self, state: PickState) -> None:
        self._blobs[state.category.lower()] = json.dumps(state.to_dict())

    async def delete(self, category: str) -> None:
        self._blobs.pop(category.lower(), None)
