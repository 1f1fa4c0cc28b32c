"""
Event Types for the Event Tracking System

Defines all accepted event types as an enum for type safety and consistency.
"""

from enum import Enum


class EventType(Enum):
    """Accepted event types."""

    # Counted in KPIs and breakdowns
    PAGEVIEW = "pageview"

    # Custom interaction, only visible on the time series
    EVENT = "event"

    # Presence ping, never written to the event log
    HEARTBEAT = "heartbeat"

    @classmethod
    def is_valid(cls, event_type: str) -> bool:
        """Check if an event type string is valid."""
        try:
            cls(event_type)
            return True
        except ValueError:
            return False
