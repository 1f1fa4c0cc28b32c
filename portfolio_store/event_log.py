"""
Event Log Store

Append-only analytics log, one JSON Lines file per server-local calendar day.
Lines are never rewritten; readers skip anything that does not decode to a
JSON object.
"""

import fcntl
import json
import logging
import os
from collections import deque
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

LOG_SUFFIX = ".jsonl"
DIR_MODE = 0o775
FILE_MODE = 0o664


def _chmod_quietly(path: Path, mode: int) -> None:
    """Relax permissions so the web server user can keep writing."""
    try:
        os.chmod(path, mode)
    except OSError as exc:
        logger.debug(f"chmod {oct(mode)} failed for {path.name}: {exc}")


class EventLogStore:
    """Daily JSON Lines files under a single directory."""

    def __init__(self, log_dir: Path):
        """Initialize the store.

        Args:
            log_dir: Directory holding the ``YYYY-MM-DD.jsonl`` files
        """
        self.log_dir = Path(log_dir)

    def day_file(self, day: date) -> Path:
        """Get the log file path for a calendar day."""
        return self.log_dir / f"{day.isoformat()}{LOG_SUFFIX}"

    def ensure_dir(self) -> None:
        """Create the log directory on first use."""
        if not self.log_dir.is_dir():
            self.log_dir.mkdir(parents=True, exist_ok=True)
            _chmod_quietly(self.log_dir, DIR_MODE)

    def append_event(self, record: Dict[str, Any], day: Optional[date] = None) -> Path:
        """Append one record as a single line to the day's log.

        The write happens under an exclusive ``flock`` so concurrent
        appenders never interleave partial lines.

        Args:
            record: JSON-serializable event record
            day: Target day, defaults to today (server-local)

        Returns:
            Path of the file written

        Raises:
            OSError: If the directory or file cannot be written
        """
        self.ensure_dir()
        path = self.day_file(day or date.today())
        line = json.dumps(record, ensure_ascii=False, separators=(",", ":")) + "\n"

        with open(path, "a", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(line)
                f.flush()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        _chmod_quietly(path, FILE_MODE)
        return path

    def read_day(self, day: date) -> Iterator[Dict[str, Any]]:
        """Yield every decodable record of one day.

        A missing file yields nothing. Lines that are not JSON objects are
        skipped without stopping the scan.
        """
        path = self.day_file(day)
        if not path.is_file():
            return

        skipped = 0
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except ValueError:
                    skipped += 1
                    continue
                if not isinstance(record, dict):
                    skipped += 1
                    continue
                yield record

        if skipped:
            logger.debug(f"Skipped {skipped} undecodable lines in {path.name}")

    def scan_range(self, start: date, end: date) -> Iterator[Tuple[date, Dict[str, Any]]]:
        """Yield ``(day, record)`` for every record from ``start`` to ``end`` inclusive."""
        day = start
        while day <= end:
            for record in self.read_day(day):
                yield day, record
            day += timedelta(days=1)

    def tail(self, day: date, limit: int = 5) -> Tuple[int, List[str]]:
        """Count raw lines of a day and return the last ``limit`` of them."""
        path = self.day_file(day)
        if not path.is_file():
            return 0, []

        count = 0
        last_lines: deque = deque(maxlen=limit)
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                count += 1
                last_lines.append(line.strip())
        return count, list(last_lines)
