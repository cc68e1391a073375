"""Persisted daily pick record.

A PickState is replaced wholesale on every transition. Nothing mutates one in
place; the machine builds a new instance with dataclasses.replace or from
scratch.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from gamenight.services.confidence import ConfidenceTier
from gamenight.services.events.dates import parse_instant


class PickStateError(Exception):
    """Raised when a persisted pick state cannot be deserialized."""


class LockReason(str, Enum):
    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    MANUAL = "MANUAL"


class OverrideReason(str, Enum):
    POSTPONED = "POSTPONED"
    REMOVED_FROM_SLATE = "REMOVED_FROM_SLATE"
    CRITICAL_DATA_MISSING = "CRITICAL_DATA_MISSING"
    DRASTIC_CHANGE = "DRASTIC_CHANGE"


@dataclass(frozen=True)
class PickState:
    """The one persisted pick per category per day."""

    category: str
    pick_date: str
    event_id: str
    event: dict[str, Any]
    chosen_at: datetime
    last_evaluated_at: datetime
    score: int
    tier: ConfidenceTier
    alternates: tuple[str, ...] = ()
    locked: bool = False
    locked_reason: LockReason | None = None
    override_reason: OverrideReason | None = None
    override_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "pickDate": self.pick_date,
            "eventId": self.event_id,
            "event": self.event,
            "chosenAt": self.chosen_at.isoformat(),
            "lastEvaluatedAt": self.last_evaluated_at.isoformat(),
            "score": self.score,
            "tier": self.tier.value,
            "alternates": list(self.alternates),
            "locked": self.locked,
            "lockedReason": self.locked_reason.value if self.locked_reason else None,
            "overrideReason": self.override_reason.value if self.override_reason else None,
            "overrideMessage": self.override_message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PickState":
        """
        Rebuild a state from its JSON form.

        Raises:
            PickStateError: On missing keys or unparsable values
        """
        try:
            chosen_at = parse_instant(data["chosenAt"])
            last_evaluated_at = parse_instant(data.get("lastEvaluatedAt") or data["chosenAt"])
            if chosen_at is None or last_evaluated_at is None:
                raise ValueError("unparsable timestamp")
            locked_reason = data.get("lockedReason")
            override_reason = data.get("overrideReason")
            return cls(
                category=data["category"],
                pick_date=data["pickDate"],
                event_id=str(data["eventId"]),
                event=data.get("event") or {},
                chosen_at=chosen_at,
                last_evaluated_at=last_evaluated_at,
                score=int(data.get("score", 0)),
                tier=ConfidenceTier(data.get("tier", ConfidenceTier.WEAK.value)),
                alternates=tuple(str(a) for a in data.get("alternates") or ()),
                locked=bool(data.get("locked", False)),
                locked_reason=LockReason(locked_reason) if locked_reason else None,
                override_reason=OverrideReason(override_reason) if override_reason else None,
                override_message=data.get("overrideMessage"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PickStateError(f"Invalid pick state: {e}") from e
