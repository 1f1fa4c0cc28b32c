"""
Factory for creating the site settings module.
"""
from pathlib import Path

from .routes import create_site_settings_blueprint
from .services import SiteSettingsService


def create_site_settings_module(settings_dir: Path, auth_service) -> dict:
    """Create site settings module with service and routes."""
    settings_service = SiteSettingsService(settings_dir)
    blueprint = create_site_settings_blueprint(settings_service, auth_service)

    return {
        "service": settings_service,
        "blueprint": blueprint
    }
