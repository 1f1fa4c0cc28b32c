"""
Presence Tracker

Shared map of anonymous client id -> last heartbeat (Unix seconds), stored
as one JSON object. Staleness is computed at read time against a fixed TTL.
"""

import fcntl
import json
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 300


def _is_timestamp(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PresenceTracker:
    """Heartbeat store backed by ``active.json``."""

    def __init__(self, active_file: Path, ttl_sec: int = DEFAULT_TTL_SEC):
        """Initialize the tracker.

        Args:
            active_file: Path of the shared presence JSON file
            ttl_sec: Seconds after which a heartbeat no longer counts as online
        """
        self.active_file = Path(active_file)
        self.lock_file = self.active_file.with_name(self.active_file.name + ".lock")
        self.ttl_sec = ttl_sec

    @contextmanager
    def _exclusive(self):
        """Hold an exclusive lock for a whole read-modify-write cycle."""
        self.active_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_file, "a") as lock:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def load(self) -> Dict[str, float]:
        """Load the raw presence map; unreadable content counts as empty."""
        try:
            data = json.loads(self.active_file.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, active: Dict[str, float]) -> None:
        tmp_path = self.active_file.with_name(self.active_file.name + ".tmp")
        tmp_path.write_text(json.dumps(active, separators=(",", ":")), encoding="utf-8")
        os.replace(tmp_path, self.active_file)
        try:
            os.chmod(self.active_file, 0o664)
        except OSError:
            pass

    def record_heartbeat(self, client_id: str, now: Optional[int] = None) -> int:
        """Set ``client_id``'s last-seen time to ``now`` and prune stale entries.

        Args:
            client_id: Anonymous client identifier
            now: Unix timestamp, defaults to the current time

        Returns:
            Number of entries kept in the map after the update
        """
        now = int(time.time()) if now is None else int(now)
        with self._exclusive():
            active = {
                uid: ts for uid, ts in self.load().items()
                if _is_timestamp(ts) and now - int(ts) <= self.ttl_sec
            }
            active[client_id] = now
            self._save(active)
        logger.debug(f"Heartbeat recorded, {len(active)} active entries")
        return len(active)

    def active_ids(self, ttl_sec: Optional[int] = None, now: Optional[float] = None) -> List[str]:
        """Get ids whose last heartbeat is at most ``ttl_sec`` seconds old."""
        ttl = self.ttl_sec if ttl_sec is None else ttl_sec
        now = int(time.time()) if now is None else int(now)
        return [
            uid for uid, ts in self.load().items()
            if _is_timestamp(ts) and now - int(ts) <= ttl
        ]

    def count_active_since(self, ttl_sec: Optional[int] = None, now: Optional[float] = None) -> int:
        """Count clients seen within the TTL."""
        return len(self.active_ids(ttl_sec, now))
