"""
JSON descriptor helpers shared by the content stores.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, List

logger = logging.getLogger(__name__)


def read_json(path: Path, default: Any = None) -> Any:
    """Read a JSON file, returning ``default`` when missing or undecodable."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning(f"Ignoring unreadable JSON file {Path(path).name}: {exc}")
        return default


def read_json_object(path: Path) -> dict:
    """Read a JSON file that must hold an object; anything else is ``{}``."""
    data = read_json(path, {})
    return data if isinstance(data, dict) else {}


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write JSON through a temporary file and an atomic rename.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(json.dumps(data, indent=indent, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp_path, path)


def natural_sort_key(name: str) -> List[Any]:
    """Sort key that orders ``img2`` before ``img10``."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", name)]


def list_subdirs(path: Path, numeric_only: bool = False) -> List[Path]:
    """List direct child directories, optionally only purely numeric names."""
    path = Path(path)
    if not path.is_dir():
        return []
    dirs = [p for p in path.iterdir() if p.is_dir()]
    if numeric_only:
        dirs = [p for p in dirs if p.name.isdecimal()]
    return sorted(dirs, key=lambda p: p.name)
