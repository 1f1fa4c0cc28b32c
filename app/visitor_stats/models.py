"""
Data Models for Visitor Stats

Defines the data structures used by the visitor stats system.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any


@dataclass
class VisitorStats:
    """Aggregated statistics for one inclusive day range."""

    range_from: str
    range_to: str
    days: int
    pageviews: int = 0
    visitors: int = 0
    online_now: int = 0
    timeseries: List[Dict[str, Any]] = field(default_factory=list)
    top_paths: List[Dict[str, Any]] = field(default_factory=list)
    entry_paths: List[Dict[str, Any]] = field(default_factory=list)
    countries: List[Dict[str, Any]] = field(default_factory=list)
    browsers: List[Dict[str, Any]] = field(default_factory=list)
    referrers: List[Dict[str, Any]] = field(default_factory=list)
    devices: List[Dict[str, Any]] = field(default_factory=list)
    utm_sources: List[Dict[str, Any]] = field(default_factory=list)
    utm_mediums: List[Dict[str, Any]] = field(default_factory=list)
    utm_campaigns: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "range": {"from": self.range_from, "to": self.range_to},
            "days": self.days,
            "kpis": {
                "pageviews": self.pageviews,
                "visitors": self.visitors,
                "onlineNow": self.online_now
            },
            "timeseries": self.timeseries,
            "topPaths": self.top_paths,
            "entryPaths": self.entry_paths,
            "countries": self.countries,
            "browsers": self.browsers,
            "referrers": self.referrers,
            "devices": self.devices,
            "utmSources": self.utm_sources,
            "utmMediums": self.utm_mediums,
            "utmCampaigns": self.utm_campaigns
        }


@dataclass
class DiagnosticsReport:
    """Operational snapshot of the analytics storage."""

    logs_dir: str
    today_file: str
    active_file: str
    logs_dir_exists: bool = False
    today_file_exists: bool = False
    active_file_exists: bool = False
    logs_dir_writable: bool = False
    today_count: int = 0
    last_lines: List[str] = field(default_factory=list)
    active_count: int = 0
    active_uuids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "paths": {
                "logsDir": self.logs_dir,
                "todayFile": self.today_file,
                "activeFile": self.active_file
            },
            "exists": {
                "logsDir": self.logs_dir_exists,
                "todayFile": self.today_file_exists,
                "activeFile": self.active_file_exists
            },
            "writable": {"logsDir": self.logs_dir_writable},
            "today": {"count": self.today_count, "lastLines": self.last_lines},
            "active": {"count": self.active_count, "uuids": self.active_uuids}
        }
