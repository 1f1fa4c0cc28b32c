"""
Gallery service: folder-per-gallery storage under ``<uploads>/<year>/<name>/``.
"""

import hmac
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import bcrypt

from app.request_utils import upload_size
from portfolio_store.errors import InvalidInput, NotFound, Conflict, StorageError, Unauthorized
from portfolio_store.filenames import is_valid_entry_name, normalize_upload_filename, unique_filename
from portfolio_store.image_previews import PREVIEW_DIR_NAME, create_preview, preview_path_for
from portfolio_store.json_files import list_subdirs, natural_sort_key, read_json_object, write_json

from .models import (
    ACCESS_PASSWORD,
    ACCESS_PUBLIC,
    DEFAULT_CATEGORY,
    IDENTITY_KEYS,
    SECRET_KEYS,
    Gallery,
    GalleryCreateRequest,
)

logger = logging.getLogger(__name__)

META_FILE_NAME = "meta.json"
UPLOAD_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")


def _strip_query(value: str) -> str:
    return value.split("?", 1)[0]


class GalleryService:
    """CRUD over gallery folders and their ``meta.json`` descriptors."""

    def __init__(
        self,
        uploads_dir: Path,
        preview_max_edge: int = 600,
        max_upload_mb: int = 25,
        allowed_extensions=DEFAULT_IMAGE_EXTENSIONS,
        bcrypt_rounds: Optional[int] = None
    ):
        """Initialize the gallery service.

        Args:
            uploads_dir: Root holding the numeric year folders
            preview_max_edge: Long edge of preview thumbnails in pixels
            max_upload_mb: Size limit for a single uploaded image
            allowed_extensions: Image extensions accepted for upload and listing
            bcrypt_rounds: Optional bcrypt cost (for testing). Default uses bcrypt default.
        """
        self.uploads_dir = Path(uploads_dir)
        self.preview_max_edge = preview_max_edge
        self.max_upload_bytes = max_upload_mb * 1024 * 1024
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.bcrypt_rounds = bcrypt_rounds

    # Helpers

    def _is_image(self, name: str) -> bool:
        return Path(name).suffix.lower().lstrip(".") in self.allowed_extensions

    def _validate_identity(self, year: Any, gallery: Any) -> tuple:
        year = str(year or "").strip()
        gallery = str(gallery or "").strip()
        if not year or not gallery:
            raise InvalidInput("Year and gallery are required")
        if not year.isdigit():
            raise InvalidInput("Year must be numeric")
        if not is_valid_entry_name(gallery):
            raise InvalidInput("Invalid gallery name")
        return year, gallery

    def _gallery_dir(self, year: Any, gallery: Any) -> Path:
        """Resolve an existing gallery folder, trying the URL-decoded name first."""
        year, gallery = self._validate_identity(year, gallery)
        for name in (unquote(gallery), gallery):
            if is_valid_entry_name(name):
                candidate = self.uploads_dir / year / name
                if candidate.is_dir():
                    return candidate
        raise NotFound("Gallery not found")

    def _list_images(self, gallery_dir: Path) -> List[str]:
        names = [p.name for p in gallery_dir.iterdir() if p.is_file() and self._is_image(p.name)]
        return sorted(names, key=natural_sort_key)

    def _save_meta(self, gallery_dir: Path, meta: Dict[str, Any]) -> None:
        try:
            write_json(gallery_dir / META_FILE_NAME, meta)
        except OSError as exc:
            logger.error(f"Failed to write meta.json for {gallery_dir.name}: {exc}")
            raise StorageError("Failed to write meta.json") from exc

    def hash_password(self, password: str) -> str:
        """Hash a gallery password with bcrypt."""
        if self.bcrypt_rounds is not None:
            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        else:
            salt = bcrypt.gensalt()
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    # Operations

    def list_galleries(self) -> List[Gallery]:
        """List every gallery, newest year first, then by name."""
        galleries = []
        for year_dir in list_subdirs(self.uploads_dir, numeric_only=True):
            for gallery_dir in list_subdirs(year_dir):
                meta = read_json_object(gallery_dir / META_FILE_NAME)
                galleries.append(
                    Gallery.from_meta(year_dir.name, gallery_dir.name, meta, self._list_images(gallery_dir))
                )
        galleries.sort(key=lambda g: g.galerie)
        galleries.sort(key=lambda g: int(g.jahr), reverse=True)
        return galleries

    def create_gallery(self, request: GalleryCreateRequest) -> Gallery:
        """Create a gallery folder with its initial meta.json.

        Raises:
            InvalidInput: If year or name is missing or invalid
            Conflict: If the folder already exists
        """
        year, name = self._validate_identity(request.jahr, request.galerie)
        gallery_dir = self.uploads_dir / year / name
        if gallery_dir.exists():
            raise Conflict("Gallery already exists")

        try:
            gallery_dir.mkdir(parents=True)
        except OSError as exc:
            logger.error(f"Failed to create gallery directory {year}/{name}: {exc}")
            raise StorageError("Failed to create gallery directory") from exc

        tags = list(request.tags)
        if request.kategorie not in tags:
            tags.append(request.kategorie)

        meta = {
            "jahr": year,
            "galerie": name,
            "kategorie": request.kategorie,
            "tags": tags,
            "isVideo": False,
            "uploadDate": datetime.now().strftime(UPLOAD_DATE_FORMAT),
            "accessType": request.accessType or ACCESS_PUBLIC
        }
        self._save_meta(gallery_dir, meta)
        logger.info(f"Created gallery {year}/{name}")
        return Gallery.from_meta(year, name, meta)

    def update_gallery(self, year: Any, gallery: Any, metadata: Dict[str, Any]) -> Gallery:
        """Merge ``metadata`` into a gallery's meta.json.

        Identity keys in ``metadata`` are ignored and ``uploadDate`` is kept.
        A non-empty ``password`` is stored as a bcrypt hash; leaving the
        ``password`` access type removes every stored secret.
        """
        if not isinstance(metadata, dict):
            raise InvalidInput("metadata must be an object")

        gallery_dir = self._gallery_dir(year, gallery)
        existing = read_json_object(gallery_dir / META_FILE_NAME)

        updates = {k: v for k, v in metadata.items() if k not in IDENTITY_KEYS and k not in SECRET_KEYS}
        merged = dict(existing)
        merged.update(updates)
        if "uploadDate" in existing:
            merged["uploadDate"] = existing["uploadDate"]
        merged["jahr"] = gallery_dir.parent.name
        merged["galerie"] = gallery_dir.name

        if merged.get("accessType", ACCESS_PUBLIC) != ACCESS_PASSWORD:
            for key in SECRET_KEYS:
                merged.pop(key, None)
        else:
            new_password = metadata.get("password")
            if isinstance(new_password, str) and new_password:
                merged["passwordHash"] = self.hash_password(new_password)
                merged.pop("password", None)
                merged.pop("passwort", None)

        self._save_meta(gallery_dir, merged)
        logger.info(f"Updated gallery {merged['jahr']}/{merged['galerie']}")
        return Gallery.from_meta(merged["jahr"], merged["galerie"], merged, self._list_images(gallery_dir))

    def delete_gallery(self, year: Any, gallery: Any) -> None:
        """Remove a gallery folder with all its images."""
        gallery_dir = self._gallery_dir(year, gallery)
        try:
            shutil.rmtree(gallery_dir)
        except OSError as exc:
            logger.error(f"Failed to delete gallery {gallery_dir.parent.name}/{gallery_dir.name}: {exc}")
            raise StorageError("Failed to delete gallery") from exc
        logger.info(f"Deleted gallery {gallery_dir.parent.name}/{gallery_dir.name}")

    def upload_image(self, year: Any, gallery: Any, file_storage, kategorie: Optional[str] = None) -> Dict[str, Any]:
        """Store one uploaded image, write its preview and refresh meta.json.

        The gallery folder is created when missing. A failed preview is
        logged and reported, but the upload still succeeds.

        Returns:
            Dictionary with the stored ``filename`` and a ``preview`` flag
        """
        year, name = self._validate_identity(year, gallery)
        if file_storage is None or not file_storage.filename:
            raise InvalidInput("No file uploaded")

        mimetype = file_storage.mimetype or ""
        if not self._is_image(file_storage.filename) or (
            mimetype and not mimetype.startswith("image/") and mimetype != "application/octet-stream"
        ):
            raise InvalidInput("Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed.")

        if upload_size(file_storage) > self.max_upload_bytes:
            raise InvalidInput("File too large")

        gallery_dir = self.uploads_dir / year / name
        try:
            gallery_dir.mkdir(parents=True, exist_ok=True)
            filename = unique_filename(gallery_dir, normalize_upload_filename(file_storage.filename))
            file_storage.save(str(gallery_dir / filename))
        except OSError as exc:
            logger.error(f"Failed to store upload in {year}/{name}: {exc}")
            raise StorageError("Failed to store uploaded file") from exc

        preview = create_preview(gallery_dir / filename, self.preview_max_edge)

        meta = read_json_object(gallery_dir / META_FILE_NAME)
        meta["jahr"] = year
        meta["galerie"] = name
        if kategorie:
            meta["kategorie"] = kategorie
        meta.setdefault("kategorie", DEFAULT_CATEGORY)
        meta["uploadDate"] = datetime.now().strftime(UPLOAD_DATE_FORMAT)
        meta.setdefault("accessType", ACCESS_PUBLIC)
        tags = meta.get("tags")
        if not isinstance(tags, list):
            tags = []
        if meta["kategorie"] not in tags:
            tags.append(meta["kategorie"])
        meta["tags"] = tags
        self._save_meta(gallery_dir, meta)

        logger.info(f"Uploaded {filename} to {year}/{name}")
        return {"filename": filename, "preview": preview}

    def _find_entry(self, directory: Path, names: List[str]) -> Optional[Path]:
        if not directory.is_dir():
            return None
        for candidate in names:
            path = directory / candidate
            if is_valid_entry_name(candidate) and path.is_file():
                return path
        wanted = names[-1].lower()
        for path in directory.iterdir():
            if path.is_file() and path.name.lower() == wanted:
                return path
        return None

    def delete_image(self, year: Any, gallery: Any, image_name: Any) -> str:
        """Delete one image and its preview.

        ``image_name`` may carry a cache-busting query string and may be
        URL-encoded; the lookup falls back to a case-insensitive match and
        finally to a preview-only file.

        Returns:
            Message describing what was removed
        """
        raw_name = str(image_name or "").strip()
        if not raw_name:
            raise InvalidInput("Year, gallery, and image name are required")
        gallery_dir = self._gallery_dir(year, gallery)

        names = []
        for candidate in (_strip_query(raw_name), _strip_query(unquote(raw_name))):
            candidate = Path(candidate).name
            if candidate and candidate not in names:
                names.append(candidate)

        image_path = self._find_entry(gallery_dir, names)
        if image_path is None:
            preview_only = self._find_entry(gallery_dir / PREVIEW_DIR_NAME, names)
            if preview_only is None:
                raise NotFound("Image not found", {"tried": names})
            self._unlink(preview_only)
            logger.info(f"Deleted orphan preview {preview_only.name} in {gallery_dir.name}")
            return "Preview deleted"

        self._unlink(image_path)
        preview = preview_path_for(image_path)
        if preview.is_file():
            try:
                preview.unlink()
            except OSError as exc:
                logger.warning(f"Failed to delete preview {preview.name}: {exc}")
        logger.info(f"Deleted image {image_path.name} in {gallery_dir.name}")
        return "Image deleted successfully"

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink()
        except OSError as exc:
            logger.error(f"Failed to delete {path.name}: {exc}")
            raise StorageError("Failed to delete image file") from exc

    def verify_password(self, year: Any, gallery: Any, password: Optional[str]) -> Dict[str, Any]:
        """Check a visitor's password for a protected gallery.

        Raises:
            Unauthorized: If the password is wrong
        """
        gallery_dir = self._gallery_dir(year, gallery)
        meta = read_json_object(gallery_dir / META_FILE_NAME)

        access_type = meta.get("accessType", meta.get("zugriff", ACCESS_PUBLIC))
        if access_type != ACCESS_PASSWORD:
            return {"success": True, "requiresPassword": False}

        if not password:
            return {"success": False, "requiresPassword": True, "message": "Password required"}

        if self._check_password(meta, str(password)):
            return {"success": True, "requiresPassword": True, "valid": True}

        logger.info(f"Wrong password for gallery {gallery_dir.parent.name}/{gallery_dir.name}")
        raise Unauthorized("Invalid password", {"requiresPassword": True, "valid": False})

    @staticmethod
    def _check_password(meta: Dict[str, Any], password: str) -> bool:
        password_hash = meta.get("passwordHash")
        if isinstance(password_hash, str) and password_hash:
            try:
                return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
            except ValueError:
                logger.warning("Stored gallery password hash is malformed")
                return False

        # Galleries created before hashing keep a plaintext value
        legacy = meta.get("password") or meta.get("passwort") or ""
        if not legacy:
            return False
        return hmac.compare_digest(str(legacy).encode("utf-8"), password.encode("utf-8"))
