"""Provider proxy client module."""

from gamenight.services.espn_client.api import (
    EspnClient,
    EventFeed,
    ProviderErrorType,
    SourceDataError,
)
from gamenight.services.espn_client.transform import parse_roster, transform_event

__all__ = [
    "EspnClient",
    "EventFeed",
    "ProviderErrorType",
    "SourceDataError",
    "parse_roster",
    "transform_event",
]
