"""Unit tests for pick state persistence."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from gamenight.services.confidence import ConfidenceTier
from gamenight.services.picks.state import LockReason, PickState, PickStateError
from gamenight.services.picks.store import MemoryPickStateStore, RedisPickStateStore

CHOSEN = datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)


def sample_state(**overrides):
    values = dict(
        category="nba",
        pick_date="2026-03-01",
        event_id="401",
        event={"id": "401", "homeTeam": {"abbreviation": "OKC"}, "awayTeam": {"abbreviation": "DEN"}},
        chosen_at=CHOSEN,
        last_evaluated_at=CHOSEN,
        score=82,
        tier=ConfidenceTier.CLEAR,
        alternates=("402", "403"),
        locked=True,
        locked_reason=LockReason.STARTED,
    )
    values.update(overrides)
    return PickState(**values)


class TestPickStateSerialization:
    """Test PickState.to_dict() / from_dict()."""

    def test_camel_case_keys(self):
        data = sample_state().to_dict()

        assert data["pickDate"] == "2026-03-01"
        assert data["eventId"] == "401"
        assert data["lockedReason"] == "STARTED"
        assert data["overrideReason"] is None
        assert data["alternates"] == ["402", "403"]

    def test_from_dict_restores_state(self):
        state = sample_state()
        assert PickState.from_dict(state.to_dict()) == state

    def test_missing_key_raises(self):
        data = sample_state().to_dict()
        del data["eventId"]

        with pytest.raises(PickStateError):
            PickState.from_dict(data)

    def test_unknown_enum_raises(self):
        data = sample_state().to_dict()
        data["lockedReason"] = "BORED"

        with pytest.raises(PickStateError):
            PickState.from_dict(data)


class TestMemoryPickStateStore:
    """Test MemoryPickStateStore."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = MemoryPickStateStore()

    @pytest.mark.asyncio
    async def test_load_missing(self):
        assert await self.store.load("nba") is None

    @pytest.mark.asyncio
    async def test_save_then_load(self):
        state = sample_state()
        await self.store.save(state)

        loaded = await self.store.load("NBA")
        assert loaded == state

    @pytest.mark.asyncio
    async def test_save_replaces(self):
        await self.store.save(sample_state())
        await self.store.save(sample_state(event_id="402", locked=False, locked_reason=None))

        loaded = await self.store.load("nba")
        assert loaded.event_id == "402"
        assert loaded.locked is False

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.store.save(sample_state())
        await self.store.delete("nba")
        assert await self.store.load("nba") is None

    @pytest.mark.asyncio
    async def test_corrupt_blob_treated_as_absent(self):
        self.store._blobs["nba"] = "{not json"
        assert await self.store.load("nba") is None

    @pytest.mark.asyncio
    async def test_non_object_blob_treated_as_absent(self):
        self.store._blobs["nba"] = "[1, 2]"
        assert await self.store.load("nba") is None


class TestRedisPickStateStore:
    """Test RedisPickStateStore against a mocked client."""

    def setup_method(self):
        """Set up test fixtures."""
        self.redis = AsyncMock()
        self.store = RedisPickStateStore(self.redis, ttl_seconds=60)

    @pytest.mark.asyncio
    async def test_save_writes_json_with_ttl(self):
        await self.store.save(sample_state())

        self.redis.set.assert_awaited_once()
        key, blob = self.redis.set.await_args.args
        assert key == "gamenight:pick_state:nba"
        assert json.loads(blob)["eventId"] == "401"
        assert self.redis.set.await_args.kwargs["ex"] == 60

    @pytest.mark.asyncio
    async def test_load_decodes_bytes(self):
        self.redis.get.return_value = json.dumps(sample_state().to_dict()).encode()

        loaded = await self.store.load("nba")

        self.redis.get.assert_awaited_once_with("gamenight:pick_state:nba")
        assert loaded == sample_state()

    @pytest.mark.asyncio
    async def test_load_missing_key(self):
        self.redis.get.return_value = None
        assert await self.store.load("nfl") is None

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.store.delete("MLB")
        self.redis.delete.assert_awaited_once_with("gamenight:pick_state:mlb")
