"""
Event Tracker

Main class for handling event ingestion including privacy filters,
normalization, anonymization and storage.
"""

import logging
from datetime import datetime
from typing import Optional

from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker

from .event_types import EventType
from .geo import CountryResolver
from .models import Event, EventPayload, TrackResult
from .privacy import anonymize_ip, classify_device, is_bot

logger = logging.getLogger(__name__)


class EventTracker:
    """Main event tracking system."""

    def __init__(
        self,
        event_log: EventLogStore,
        presence: PresenceTracker,
        country_resolver: Optional[CountryResolver] = None,
        skip_admin_paths: bool = True
    ):
        """Initialize the event tracker.

        Args:
            event_log: Daily log store receiving accepted events
            presence: Presence tracker receiving heartbeats
            country_resolver: Optional geolocation resolver
            skip_admin_paths: Whether pageviews under ``/admin`` are ignored
        """
        self.event_log = event_log
        self.presence = presence
        self.country_resolver = country_resolver
        self.skip_admin_paths = skip_admin_paths

    def _skip(self, reason: str) -> TrackResult:
        logger.debug(f"Event skipped: {reason}")
        return TrackResult(success=True, skipped=True, message=reason)

    def build_event(
        self,
        payload: EventPayload,
        client_ip: str,
        user_agent: str,
        received_at: Optional[datetime] = None
    ) -> Event:
        """Apply defaults and anonymization to produce the stored record.

        Args:
            payload: Validated payload from the frontend
            client_ip: Original client address, used for the country lookup only
            user_agent: Request ``User-Agent`` header, used when the payload has none
            received_at: Receipt time, defaults to now

        Returns:
            Event ready to be appended
        """
        received_at = received_at or datetime.now()
        ua = payload.ua if payload.ua is not None else (user_agent or "")
        country = self.country_resolver.resolve(client_ip) if self.country_resolver else None

        return Event(
            ts=payload.ts or received_at.astimezone().isoformat(timespec="seconds"),
            type=payload.type,
            path=payload.path or "/",
            referrer=payload.referrer,
            ua=ua,
            lang=payload.lang,
            screen=payload.screen,
            dpr=payload.dpr,
            uuid=payload.uuid,
            tz=payload.tz,
            device=payload.device or classify_device(ua),
            utm=payload.utm_dict(),
            ip=anonymize_ip(client_ip),
            country=country,
            data=payload.data
        )

    def process_event_payload(
        self,
        payload: EventPayload,
        client_ip: str,
        user_agent: str = "",
        received_at: Optional[datetime] = None
    ) -> TrackResult:
        """Process an event payload from the frontend.

        Args:
            payload: Validated payload
            client_ip: Original client address
            user_agent: Request ``User-Agent`` header
            received_at: Receipt time, defaults to now

        Returns:
            TrackResult describing whether the event was stored or skipped
        """
        if payload.dnt:
            return self._skip("Do Not Track")

        if not EventType.is_valid(payload.type):
            return self._skip(f"Unsupported event type: {payload.type}")

        ua = payload.ua if payload.ua is not None else (user_agent or "")

        if (
            self.skip_admin_paths
            and payload.type == EventType.PAGEVIEW.value
            and payload.path.startswith("/admin")
        ):
            return self._skip("Admin pageview")

        if is_bot(ua):
            return self._skip("Bot user agent")

        if payload.type == EventType.HEARTBEAT.value:
            return self.record_heartbeat(payload.uuid)

        event = self.build_event(payload, client_ip, user_agent, received_at)
        day = (received_at or datetime.now()).date()
        try:
            self.event_log.append_event(event.to_dict(), day=day)
        except OSError as exc:
            logger.error(f"Failed to append analytics event: {exc}")
            return TrackResult(success=False, message="Write failed", status_code=500)

        return TrackResult(success=True)

    def record_heartbeat(self, client_id: Optional[str]) -> TrackResult:
        """Record a presence heartbeat for an anonymous client."""
        if not client_id:
            return self._skip("Heartbeat without client id")
        try:
            self.presence.record_heartbeat(client_id)
        except OSError as exc:
            logger.error(f"Failed to record heartbeat: {exc}")
            return TrackResult(success=False, message="Write failed", status_code=500)
        return TrackResult(success=True)
