"""
Data models for the uploads file manager.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

ENTRY_DIR = "dir"
ENTRY_FILE = "file"


@dataclass
class FileEntry:
    """One directory entry below the uploads root."""

    name: str
    type: str
    size: int
    mtime: int
    path: str
    url: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type == ENTRY_DIR

    def sort_key(self):
        """Directories first, then case-insensitive name."""
        return (not self.is_dir, self.name.lower())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class UploadOutcome:
    """Per-file result of a multi-file upload."""

    name: str
    ok: bool
    message: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out unset fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}
