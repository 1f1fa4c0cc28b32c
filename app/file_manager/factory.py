"""
Factory for creating the file manager module.
"""
from pathlib import Path

from .routes import create_file_manager_blueprint
from .services import FileManagerService


def create_file_manager_module(uploads_dir: Path, uploads_base_url: str, upload_config, auth_service) -> dict:
    """Create file manager module with service and routes."""
    file_manager = FileManagerService(
        uploads_dir,
        base_url=uploads_base_url,
        max_file_mb=upload_config.max_file_manager_mb,
        allowed_extensions=upload_config.file_manager_extensions
    )
    blueprint = create_file_manager_blueprint(file_manager, auth_service)

    return {
        "service": file_manager,
        "blueprint": blueprint
    }
