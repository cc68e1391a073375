"""Availability cache module for Gamenight."""

from gamenight.services.availability.cache import (
    Availability,
    AvailabilityCache,
    AvailabilityFilter,
    RosterEntry,
)

__all__ = ["Availability", "AvailabilityCache", "AvailabilityFilter", "RosterEntry"]
