"""
Event Tracking Subsystem

Privacy-aware analytics ingestion: validates one event, anonymizes the
client address, resolves a country and appends the record to the daily log.
"""

from .event_tracker import EventTracker
from .event_types import EventType
from .models import Event, EventPayload, TrackResult

__all__ = ['EventTracker', 'EventType', 'Event', 'EventPayload', 'TrackResult']
