"""
Filename and path normalization for uploaded content.
"""

import re
import unicodedata
from pathlib import Path
from typing import Optional

UMLAUTS = {
    "ä": "ae", "Ä": "Ae",
    "ö": "oe", "Ö": "Oe",
    "ü": "ue", "Ü": "Ue",
    "ß": "ss",
}

# Characters not allowed in a single folder or file name
INVALID_NAME_CHARS = re.compile(r'[\\/:*?"<>|]')


def transliterate(text: str) -> str:
    """Fold German umlauts and other accents to plain ASCII."""
    for src, dst in UMLAUTS.items():
        text = text.replace(src, dst)
    normalized = unicodedata.normalize("NFKD", text)
    return normalized.encode("ascii", "ignore").decode("ascii")


def normalize_upload_filename(original_name: str) -> str:
    """Turn an uploaded filename into a lowercase, URL-safe name.

    ``"Schöne Aussicht (2).JPG"`` becomes ``"schoene-aussicht-2.jpg"``.
    """
    path = Path(original_name or "")
    extension = path.suffix.lower().lstrip(".")
    basename = transliterate(path.stem)
    basename = re.sub(r"[^A-Za-z0-9_.-]+", "-", basename)
    basename = re.sub(r"-+", "-", basename)
    basename = basename.strip("-_.").lower() or "image"
    return f"{basename}.{extension}" if extension else basename


def unique_filename(directory: Path, filename: str, template: str = "{stem}_{n}{suffix}") -> str:
    """Return ``filename`` or the first numbered variant not present in ``directory``."""
    directory = Path(directory)
    if not (directory / filename).exists():
        return filename
    path = Path(filename)
    counter = 1
    while True:
        candidate = template.format(stem=path.stem, n=counter, suffix=path.suffix)
        if not (directory / candidate).exists():
            return candidate
        counter += 1


def slugify(title: str, fallback: str = "post") -> str:
    """Build a directory slug from a title."""
    slug = re.sub(r"[^A-Za-z0-9-]+", "-", title or "")
    return slug.strip("-").lower() or fallback


def clean_rel_path(path: Optional[str]) -> str:
    """Normalize a client-supplied relative path.

    Backslashes become slashes, empty and ``.`` segments are dropped and
    ``..`` pops the previous segment, so the result can never climb above
    its root.
    """
    parts = []
    for segment in (path or "").replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/".join(parts)


def is_valid_entry_name(name: str) -> bool:
    """Check a single folder or file name supplied by a client."""
    name = (name or "").strip()
    return bool(name) and name not in (".", "..") and not INVALID_NAME_CHARS.search(name)
