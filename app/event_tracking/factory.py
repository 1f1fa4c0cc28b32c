"""
Factory for creating event tracking module.
"""
from pathlib import Path

from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker

from .routes import create_event_tracking_blueprint
from .event_tracker import EventTracker
from .geo import CountryResolver

ACTIVE_FILE_NAME = "active.json"


def create_event_tracking_module(analytics_dir: Path, analytics_config) -> dict:
    """Create event tracking module with service and routes.

    Args:
        analytics_dir: Directory holding the daily logs and the presence file
        analytics_config: AnalyticsConfig with geolocation and presence settings

    Returns:
        Dictionary containing the service and blueprint
    """
    event_log = EventLogStore(analytics_dir)
    presence = PresenceTracker(
        Path(analytics_dir) / ACTIVE_FILE_NAME,
        ttl_sec=analytics_config.presence_ttl_sec
    )
    country_resolver = CountryResolver(
        lookup_url=analytics_config.geo_lookup_url,
        timeout_sec=analytics_config.geo_timeout_sec,
        enabled=analytics_config.geo_enabled
    )

    event_tracker = EventTracker(event_log, presence, country_resolver)

    blueprint = create_event_tracking_blueprint(event_tracker)

    return {
        "service": event_tracker,
        "blueprint": blueprint
    }
