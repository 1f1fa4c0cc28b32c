"""
Data models for the site settings subsystem.
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

DEFAULT_CATEGORIES = [
    "BEST OF TRINAX",
    "LOSTPLACES",
    "VILLA - SOUNDLABOR",
    "LANDSCHAFT",
    "PORTRAIT",
    "URLAUB",
]
CATEGORIES_VERSION = "1.0"

DEFAULT_ORB_SETTINGS: Dict[str, Any] = {
    "enabled": True,
    "url": "",
    "sizePx": 1600,
    "speedSec": 200,
    "opacity": 0.35,
    "blend": "screen",
    "blurPx": 0,
    "hueDeg": 0,
    "saturatePct": 100,
    "contrastPct": 100,
    "brightnessPct": 100,
    "grayscale": False,
    "sepia": False,
    "tintColor": "#ff3b30",
    "tintOpacity": 0,
    "tintBlend": "soft-light",
    "enableOn": {"index": True, "gallery": True, "blog": True, "blogPost": True, "admin": True},
}


def default_orb_settings() -> Dict[str, Any]:
    """Fresh copy of the background orb defaults."""
    return copy.deepcopy(DEFAULT_ORB_SETTINGS)


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


@dataclass
class CategorySettings:
    """Gallery categories offered in the admin UI."""

    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    last_updated: str = field(default_factory=_now_iso)
    version: str = CATEGORIES_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "categories": self.categories,
            "lastUpdated": self.last_updated,
            "version": self.version
        }
