"""
Preview thumbnails for uploaded images.

Previews are a convenience for the gallery grid; callers treat a failed
preview as a warning, never as a failed upload.
"""

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PREVIEW_DIR_NAME = "preview"
PREVIEW_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}

_SAVE_OPTIONS = {
    "jpg": ("JPEG", {"quality": 70, "optimize": True}),
    "jpeg": ("JPEG", {"quality": 70, "optimize": True}),
    "png": ("PNG", {"compress_level": 6}),
    "gif": ("GIF", {}),
    "webp": ("WEBP", {"quality": 70}),
}


def preview_path_for(image_path: Path) -> Path:
    """Get the preview location for an image: ``<dir>/preview/<name>``."""
    image_path = Path(image_path)
    return image_path.parent / PREVIEW_DIR_NAME / image_path.name


def create_preview(source: Path, max_edge: int = 600) -> bool:
    """Write a downscaled copy of ``source`` into its ``preview/`` folder.

    The long edge is limited to ``max_edge`` pixels; smaller images are
    copied at their original size. Transparency is kept for PNG, GIF and
    WebP.

    Args:
        source: Path of the uploaded image
        max_edge: Maximum length of the longer side in pixels

    Returns:
        True if a preview was written, False otherwise
    """
    source = Path(source)
    extension = source.suffix.lower().lstrip(".")
    if extension not in PREVIEW_EXTENSIONS:
        return False

    target = preview_path_for(source)
    file_format, options = _SAVE_OPTIONS[extension]

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with Image.open(source) as img:
            img.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)
            if file_format == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(target, file_format, **options)
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning(f"Preview generation failed for {source.name}: {exc}")
        return False

    logger.debug(f"Preview written for {source.name}")
    return True
