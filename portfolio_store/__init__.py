# Storage package for the portfolio backend: analytics logs, presence, content files

from .event_log import EventLogStore
from .presence import PresenceTracker, DEFAULT_TTL_SEC
from .json_files import (
    read_json,
    read_json_object,
    write_json,
    natural_sort_key,
    list_subdirs,
)
from .filenames import (
    normalize_upload_filename,
    unique_filename,
    slugify,
    clean_rel_path,
    is_valid_entry_name,
)
from .image_previews import create_preview, preview_path_for
from .errors import (
    ContentError,
    InvalidInput,
    Unauthorized,
    NotFound,
    Conflict,
    StorageError,
)
from .logging_config import (
    setup_logging,
    stop_logging,
    get_logger,
)

__all__ = [
    "EventLogStore",
    "PresenceTracker",
    "DEFAULT_TTL_SEC",
    "read_json",
    "read_json_object",
    "write_json",
    "natural_sort_key",
    "list_subdirs",
    "normalize_upload_filename",
    "unique_filename",
    "slugify",
    "clean_rel_path",
    "is_valid_entry_name",
    "create_preview",
    "preview_path_for",
    "ContentError",
    "InvalidInput",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "StorageError",
    "setup_logging",
    "stop_logging",
    "get_logger",
]
