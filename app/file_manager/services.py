"""
File manager service: raw browsing and editing of the uploads tree.

Every client path is cleaned and resolved inside the uploads root; paths
that end up outside (for example through a symlink) are rejected.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple
from urllib.parse import quote

from app.request_utils import upload_size
from portfolio_store.errors import Conflict, InvalidInput, NotFound, StorageError
from portfolio_store.filenames import clean_rel_path, is_valid_entry_name, unique_filename

from .models import ENTRY_DIR, ENTRY_FILE, FileEntry, UploadOutcome

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "svg", "pdf", "zip")
DIR_MODE = 0o775
FILE_MODE = 0o664


def _join(parent: str, name: str) -> str:
    return clean_rel_path(f"{parent}/{name}" if parent else name)


class FileManagerService:
    """List, create, rename, delete and upload below the uploads root."""

    def __init__(
        self,
        root_dir: Path,
        base_url: str = "",
        max_file_mb: int = 50,
        allowed_extensions: Iterable[str] = DEFAULT_EXTENSIONS
    ):
        """Initialize the file manager.

        Args:
            root_dir: Uploads root; nothing outside it is ever touched
            base_url: Public URL prefix of the uploads root for file links
            max_file_mb: Size limit per uploaded file
            allowed_extensions: Extensions accepted for upload
        """
        self.root_dir = Path(root_dir)
        self.base_url = (base_url or "").rstrip("/")
        self.max_file_bytes = max_file_mb * 1024 * 1024
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}

    def _resolve(self, rel_path: Any) -> Tuple[str, Path]:
        """Map a client path to ``(clean relative path, absolute path)``.

        Raises:
            InvalidInput: If the path escapes the uploads root
        """
        rel = clean_rel_path(str(rel_path or ""))
        root = self.root_dir.resolve()
        full = (root / rel) if rel else root
        resolved = full.resolve()
        if resolved != root and root not in resolved.parents:
            raise InvalidInput("Invalid path")
        return rel, full

    def file_url(self, rel_path: str) -> str:
        """Public URL of a file below the uploads root."""
        return f"{self.base_url}/" + "/".join(quote(segment) for segment in rel_path.split("/"))

    def list_dir(self, rel_path: Any) -> Dict[str, Any]:
        """List a directory: folders first, then files, case-insensitive by name."""
        rel, full = self._resolve(rel_path)
        if not full.is_dir():
            raise InvalidInput("Not a directory")

        entries: List[FileEntry] = []
        for child in full.iterdir():
            try:
                stat = child.stat()
            except OSError as exc:
                logger.warning(f"Skipping unreadable entry {child.name}: {exc}")
                continue
            is_dir = child.is_dir()
            child_rel = _join(rel, child.name)
            entries.append(FileEntry(
                name=child.name,
                type=ENTRY_DIR if is_dir else ENTRY_FILE,
                size=0 if is_dir else stat.st_size,
                mtime=int(stat.st_mtime),
                path=child_rel,
                url=None if is_dir else self.file_url(child_rel)
            ))

        entries.sort(key=FileEntry.sort_key)
        return {"path": rel, "items": [e.to_dict() for e in entries]}

    def make_dir(self, rel_path: Any, name: Any) -> Dict[str, str]:
        """Create one folder inside an existing directory."""
        name = str(name or "").strip()
        if not is_valid_entry_name(name):
            raise InvalidInput("Invalid folder name")

        rel, parent = self._resolve(rel_path)
        if not parent.is_dir():
            raise InvalidInput("Invalid path")

        target = parent / name
        if target.exists():
            raise Conflict("Exists")
        try:
            target.mkdir(mode=DIR_MODE)
        except OSError as exc:
            logger.error(f"Failed to create folder {name}: {exc}")
            raise StorageError("Create failed") from exc

        created = _join(rel, name)
        logger.info(f"Created folder {created}")
        return {"created": created}

    def rename(self, rel_path: Any, new_name: Any) -> Dict[str, Dict[str, str]]:
        """Rename a file or folder in place."""
        new_name = str(new_name or "").strip()
        if not is_valid_entry_name(new_name):
            raise InvalidInput("Invalid name")

        rel, source = self._resolve(rel_path)
        if not rel or not source.exists():
            raise NotFound("Not found")

        target = source.parent / new_name
        if target.exists():
            raise Conflict("Target exists")
        try:
            source.rename(target)
            os.chmod(target, DIR_MODE if target.is_dir() else FILE_MODE)
        except OSError as exc:
            logger.error(f"Failed to rename {rel}: {exc}")
            raise StorageError("Rename failed") from exc

        parent_rel = clean_rel_path(os.path.dirname(rel))
        renamed_to = _join(parent_rel, new_name)
        logger.info(f"Renamed {rel} to {renamed_to}")
        return {"renamed": {"from": rel, "to": renamed_to}}

    def delete(self, rel_path: Any) -> Dict[str, str]:
        """Delete a file, or a folder with everything below it."""
        rel, full = self._resolve(rel_path)
        if not rel:
            raise InvalidInput("Refusing to delete the uploads root")
        if not full.exists():
            raise NotFound("Not found")
        try:
            if full.is_dir() and not full.is_symlink():
                shutil.rmtree(full)
            else:
                full.unlink()
        except OSError as exc:
            logger.error(f"Failed to delete {rel}: {exc}")
            raise StorageError("Delete failed") from exc

        logger.info(f"Deleted {rel}")
        return {"deleted": rel}

    def upload(self, rel_path: Any, files: List[Any]) -> Dict[str, List[Dict[str, Any]]]:
        """Store several uploaded files without overwriting existing ones.

        Each file is checked on its own; rejected files are reported in the
        result list instead of failing the whole request.
        """
        rel, directory = self._resolve(rel_path)
        if not directory.is_dir():
            raise InvalidInput("Invalid path")
        if not files:
            raise InvalidInput("No files")

        outcomes = []
        for file_storage in files:
            outcomes.append(self._store_one(rel, directory, file_storage).to_dict())
        return {"uploaded": outcomes}

    def _store_one(self, rel: str, directory: Path, file_storage) -> UploadOutcome:
        name = Path((file_storage.filename or "").replace("\\", "/")).name
        if not is_valid_entry_name(name):
            return UploadOutcome(name=name, ok=False, message="Invalid name")
        if upload_size(file_storage) > self.max_file_bytes:
            return UploadOutcome(name=name, ok=False, message="Too large")

        extension = Path(name).suffix.lower().lstrip(".")
        if extension and extension not in self.allowed_extensions:
            return UploadOutcome(name=name, ok=False, message="Type not allowed")

        stored_name = unique_filename(directory, name, template="{stem} ({n}){suffix}")
        target = directory / stored_name
        try:
            file_storage.save(str(target))
            os.chmod(target, FILE_MODE)
        except OSError as exc:
            logger.error(f"Failed to save upload {name}: {exc}")
            return UploadOutcome(name=name, ok=False, message="Save failed")

        logger.info(f"Uploaded {_join(rel, stored_name)}")
        return UploadOutcome(name=stored_name, ok=True, path=_join(rel, stored_name))
