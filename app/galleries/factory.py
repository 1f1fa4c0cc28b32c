"""
Factory for creating the galleries module.
"""
from pathlib import Path

from .routes import create_galleries_blueprint
from .services import GalleryService


def create_galleries_module(uploads_dir: Path, upload_config, auth_service, bcrypt_rounds: int = None) -> dict:
    """Create galleries module with service and routes.

    Args:
        uploads_dir: Root of the gallery year folders
        upload_config: UploadConfig with preview and size settings
        auth_service: Admin token service
        bcrypt_rounds: Optional bcrypt cost (for testing)

    Returns:
        Dictionary containing the service and blueprint
    """
    gallery_service = GalleryService(
        uploads_dir,
        preview_max_edge=upload_config.preview_max_edge,
        max_upload_mb=upload_config.max_upload_mb,
        allowed_extensions=upload_config.allowed_image_extensions,
        bcrypt_rounds=bcrypt_rounds
    )
    blueprint = create_galleries_blueprint(gallery_service, auth_service)

    return {
        "service": gallery_service,
        "blueprint": blueprint
    }
