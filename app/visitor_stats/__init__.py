"""
Visitor Stats Module

Aggregates the analytics logs into the dashboard statistics and exposes
storage diagnostics for administrators.
"""

from .factory import create_visitor_stats_module
from .services import VisitorStatsService, parse_browser, referrer_host

__all__ = ["create_visitor_stats_module", "VisitorStatsService", "parse_browser", "referrer_host"]
