"""
Factory for creating visitor stats module.
"""
from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker

from .services import VisitorStatsService
from .routes import create_visitor_stats_blueprint


def create_visitor_stats_module(
    event_log: EventLogStore,
    presence: PresenceTracker,
    analytics_config,
    auth_service
) -> dict:
    """Create visitor stats module with service and routes.

    Args:
        event_log: Daily log store shared with event tracking
        presence: Presence tracker shared with event tracking
        analytics_config: AnalyticsConfig with the range and top-N settings
        auth_service: Admin token service

    Returns:
        Dictionary containing the service and blueprint
    """
    visitor_stats_service = VisitorStatsService(
        event_log,
        presence,
        default_days=analytics_config.default_days,
        max_days=analytics_config.max_days,
        top_n=analytics_config.top_n
    )

    blueprint = create_visitor_stats_blueprint(
        visitor_stats_service=visitor_stats_service,
        auth_service=auth_service
    )

    return {
        "service": visitor_stats_service,
        "blueprint": blueprint
    }
