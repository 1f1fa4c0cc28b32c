"""
Factory for creating the blog module.
"""
from pathlib import Path

from .routes import create_blog_blueprint
from .services import BlogService


def create_blog_module(blog_dir: Path, index_file: Path, upload_config, auth_service) -> dict:
    """Create blog module with service and routes.

    Args:
        blog_dir: Root of the blog year folders
        index_file: Location of the generated ``blog-index.json``
        upload_config: UploadConfig with the image size limit
        auth_service: Admin token service

    Returns:
        Dictionary containing the service and blueprint
    """
    blog_service = BlogService(
        blog_dir,
        index_file,
        max_image_mb=upload_config.max_blog_image_mb,
        allowed_extensions=upload_config.allowed_image_extensions
    )
    blueprint = create_blog_blueprint(blog_service, auth_service)

    return {
        "service": blog_service,
        "blueprint": blueprint
    }
