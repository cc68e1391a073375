"""Daily pick state, persistence and refresh orchestration."""

from gamenight.services.picks.machine import PickStateMachine, Transition, TransitionKind
from gamenight.services.picks.service import PickService, RefreshResult
from gamenight.services.picks.state import LockReason, OverrideReason, PickState, PickStateError
from gamenight.services.picks.store import (
    MemoryPickStateStore,
    PickStateStore,
    RedisPickStateStore,
)

__all__ = [
    "LockReason",
    "MemoryPickStateStore",
    "OverrideReason",
    "PickService",
    "PickState",
    "PickStateError",
    "PickStateMachine",
    "PickStateStore",
    "RedisPickStateStore",
    "RefreshResult",
    "Transition",
    "TransitionKind",
]
