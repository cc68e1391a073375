"""Event model, date classification, validation and freshness for Gamenight."""

from gamenight.services.events.dates import DateCategory, DateClassification, classify
from gamenight.services.events.freshness import Freshness, check_freshness
from gamenight.services.events.models import (
    CandidateEvent,
    EventStatus,
    Side,
    TeamInfo,
    normalize_status,
    parse_record,
)
from gamenight.services.events.validation import DataQuality, ValidationResult, validate

__all__ = [
    "CandidateEvent",
    "DataQuality",
    "DateCategory",
    "DateClassification",
    "EventStatus",
    "Freshness",
    "Side",
    "TeamInfo",
    "ValidationResult",
    "check_freshness",
    "classify",
    "normalize_status",
    "parse_record",
    "validate",
]
