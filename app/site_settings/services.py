"""
Site settings service: categories and background orb appearance.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from portfolio_store.errors import InvalidInput, StorageError
from portfolio_store.json_files import read_json, write_json

from .models import CATEGORIES_VERSION, CategorySettings, default_orb_settings

logger = logging.getLogger(__name__)

CATEGORIES_FILE_NAME = "categories.json"
ORB_SETTINGS_FILE_NAME = "orb-settings.json"
BACKUP_SUFFIX_FORMAT = "%Y-%m-%d-%H-%M-%S"


class SiteSettingsService:
    """Reads and writes the JSON settings files in the settings directory."""

    def __init__(self, settings_dir: Path):
        self.settings_dir = Path(settings_dir)
        self.categories_file = self.settings_dir / CATEGORIES_FILE_NAME
        self.orb_settings_file = self.settings_dir / ORB_SETTINGS_FILE_NAME

    def _write(self, path: Path, data: Any) -> None:
        try:
            self.settings_dir.mkdir(parents=True, exist_ok=True)
            write_json(path, data)
        except OSError as exc:
            logger.error(f"Failed to write {path.name}: {exc}")
            raise StorageError(f"Failed to write {path.name}") from exc

    def get_categories(self) -> Dict[str, Any]:
        """Get the stored categories, or the defaults when none are stored."""
        data = read_json(self.categories_file)
        if isinstance(data, dict):
            return data
        return CategorySettings().to_dict()

    def update_categories(
        self,
        categories: Any,
        last_updated: Optional[str] = None,
        version: Optional[str] = None
    ) -> List[str]:
        """Replace the category list, backing up the previous file.

        Entries are trimmed and empty ones dropped.

        Returns:
            The cleaned category list
        """
        if categories is None:
            raise InvalidInput("Invalid input data")
        if not isinstance(categories, list):
            raise InvalidInput("Categories must be an array")

        cleaned = [c.strip() for c in categories if isinstance(c, str) and c.strip()]
        settings = CategorySettings(categories=cleaned, version=version or CATEGORIES_VERSION)
        if last_updated:
            settings.last_updated = last_updated

        if self.categories_file.is_file():
            backup = self.categories_file.with_name(
                f"{self.categories_file.name}.backup.{datetime.now().strftime(BACKUP_SUFFIX_FORMAT)}"
            )
            try:
                shutil.copy2(self.categories_file, backup)
            except OSError as exc:
                logger.warning(f"Failed to back up {self.categories_file.name}: {exc}")

        self._write(self.categories_file, settings.to_dict())
        logger.info(f"Updated categories ({len(cleaned)} entries)")
        return cleaned

    def get_orb_settings(self) -> Dict[str, Any]:
        """Get the stored orb settings, or the defaults when none are stored."""
        data = read_json(self.orb_settings_file)
        return data if isinstance(data, dict) else default_orb_settings()

    def update_orb_settings(self, settings: Any) -> Dict[str, Any]:
        """Store a new orb settings object as given."""
        if not isinstance(settings, dict) or not settings:
            raise InvalidInput("Missing settings")
        self._write(self.orb_settings_file, settings)
        logger.info("Updated orb settings")
        return settings
