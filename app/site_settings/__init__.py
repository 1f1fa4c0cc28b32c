"""
Site Settings Subsystem

Gallery categories and the background orb appearance, one JSON file each.
"""

from .factory import create_site_settings_module
from .services import SiteSettingsService

__all__ = ["create_site_settings_module", "SiteSettingsService"]
