"""
Visitor Stats Service

Aggregates the daily analytics logs into dashboard statistics.
"""

import logging
import os
from collections import Counter, OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker

from .models import VisitorStats, DiagnosticsReport

logger = logging.getLogger(__name__)

DIAGNOSE_TAIL_LINES = 5


def parse_browser(user_agent: str) -> str:
    """Classify a user agent into a browser family.

    Chromium-based user agents carry several engine tokens at once, so the
    checks run in a fixed order and the first match wins.
    """
    ua = (user_agent or "").lower()
    if "edg" in ua:
        return "Edge"
    if "chrome" in ua and "chromium" not in ua:
        return "Chrome"
    if "firefox" in ua:
        return "Firefox"
    if "safari" in ua and "chrome" not in ua:
        return "Safari"
    if "chromium" in ua:
        return "Chromium"
    return "Other"


def referrer_host(referrer: str) -> str:
    """Reduce a referrer URL to its host, or the raw string when there is none."""
    try:
        host = urlparse(referrer).hostname
    except ValueError:
        host = None
    return host or referrer


def _text(value: Any) -> Optional[str]:
    """Return non-empty strings only; other JSON values are ignored."""
    return value if isinstance(value, str) and value else None


class VisitorStatsService:
    """Service for computing visitor statistics from the event log."""

    def __init__(
        self,
        event_log: EventLogStore,
        presence: PresenceTracker,
        default_days: int = 30,
        max_days: int = 365,
        top_n: int = 10
    ):
        """Initialize the visitor stats service.

        Args:
            event_log: Daily log store to scan
            presence: Presence tracker for the online-now count
            default_days: Range used when the caller gives none
            max_days: Upper bound for the range
            top_n: Number of rows kept per breakdown
        """
        self.event_log = event_log
        self.presence = presence
        self.default_days = default_days
        self.max_days = max_days
        self.top_n = top_n

    def clamp_days(self, days: Optional[int]) -> int:
        """Clamp the requested day count into ``[1, max_days]``."""
        if days is None:
            days = self.default_days
        return max(1, min(self.max_days, int(days)))

    def get_date_range(self, days: int, today: Optional[date] = None) -> Tuple[date, date]:
        """Get the inclusive range of ``days`` calendar days ending today."""
        end = today or date.today()
        return end - timedelta(days=days - 1), end

    def _top(self, counter: Counter, label: str) -> List[Dict[str, Any]]:
        # most_common sorts stably, so ties keep first-occurrence order
        return [{label: key, "count": count} for key, count in counter.most_common(self.top_n)]

    def get_visitor_stats(
        self,
        days: Optional[int] = None,
        today: Optional[date] = None,
        now: Optional[float] = None
    ) -> VisitorStats:
        """Get statistics for the range of ``days`` days ending today.

        Every decoded record counts on the time series; only pageviews feed
        the KPIs and breakdowns.

        Args:
            days: Requested day count, clamped into ``[1, max_days]``
            today: Last day of the range, defaults to the server-local date
            now: Unix time for the online-now count, defaults to the current time

        Returns:
            VisitorStats with zero-filled time series and top-N breakdowns
        """
        days = self.clamp_days(days)
        start, end = self.get_date_range(days, today)

        timeseries: "OrderedDict[str, int]" = OrderedDict(
            ((start + timedelta(days=offset)).isoformat(), 0) for offset in range(days)
        )
        paths: Counter = Counter()
        entry_paths: Counter = Counter()
        countries: Counter = Counter()
        browsers: Counter = Counter()
        referrers: Counter = Counter()
        devices: Counter = Counter()
        utm_sources: Counter = Counter()
        utm_mediums: Counter = Counter()
        utm_campaigns: Counter = Counter()
        visitors = set()
        pageviews = 0

        for day, record in self.event_log.scan_range(start, end):
            timeseries[day.isoformat()] += 1

            if record.get("type", "pageview") != "pageview":
                continue

            pageviews += 1

            uuid = _text(record.get("uuid"))
            if uuid:
                visitors.add(uuid)

            path = _text(record.get("path")) or "/"
            paths[path] += 1

            data = record.get("data")
            if isinstance(data, dict) and data.get("entry"):
                entry_paths[path] += 1

            country = _text(record.get("country"))
            if country:
                countries[country] += 1

            browsers[parse_browser(_text(record.get("ua")) or "")] += 1

            referrer = _text(record.get("referrer"))
            if referrer:
                referrers[referrer_host(referrer)] += 1

            devices[_text(record.get("device")) or "unknown"] += 1

            utm = record.get("utm")
            if isinstance(utm, dict):
                for counter, key in ((utm_sources, "source"), (utm_mediums, "medium"), (utm_campaigns, "campaign")):
                    value = _text(utm.get(key))
                    if value:
                        counter[value] += 1

        return VisitorStats(
            range_from=start.isoformat(),
            range_to=end.isoformat(),
            days=days,
            pageviews=pageviews,
            visitors=len(visitors),
            online_now=self.presence.count_active_since(now=now),
            timeseries=[{"date": d, "pv": pv} for d, pv in timeseries.items()],
            top_paths=self._top(paths, "path"),
            entry_paths=self._top(entry_paths, "path"),
            countries=self._top(countries, "country"),
            browsers=self._top(browsers, "browser"),
            referrers=self._top(referrers, "referrer"),
            devices=self._top(devices, "device"),
            utm_sources=self._top(utm_sources, "source"),
            utm_mediums=self._top(utm_mediums, "medium"),
            utm_campaigns=self._top(utm_campaigns, "campaign")
        )

    def diagnose(self, today: Optional[date] = None, now: Optional[float] = None) -> DiagnosticsReport:
        """Inspect the analytics storage.

        Paths are reported by name only; the absolute location stays on the server.
        """
        today = today or date.today()
        logs_dir = self.event_log.log_dir
        today_file = self.event_log.day_file(today)
        active_file = self.presence.active_file

        count, last_lines = self.event_log.tail(today, DIAGNOSE_TAIL_LINES)
        active_uuids = self.presence.active_ids(now=now)

        return DiagnosticsReport(
            logs_dir=logs_dir.name,
            today_file=today_file.name,
            active_file=active_file.name,
            logs_dir_exists=logs_dir.is_dir(),
            today_file_exists=today_file.is_file(),
            active_file_exists=active_file.is_file(),
            logs_dir_writable=logs_dir.is_dir() and os.access(logs_dir, os.W_OK),
            today_count=count,
            last_lines=last_lines,
            active_count=len(active_uuids),
            active_uuids=active_uuids
        )
