"""
File Manager Subsystem

Raw listing, folder creation, renaming, deletion and multi-file upload
confined to the uploads root.
"""

from .factory import create_file_manager_module
from .services import FileManagerService

__all__ = ["create_file_manager_module", "FileManagerService"]
