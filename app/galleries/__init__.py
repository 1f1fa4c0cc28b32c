"""
Galleries Subsystem

Year/name gallery folders with a ``meta.json`` descriptor each, image
uploads with preview thumbnails and optional password protection.
"""

from .factory import create_galleries_module
from .models import Gallery, GalleryCreateRequest
from .services import GalleryService

__all__ = ["create_galleries_module", "Gallery", "GalleryCreateRequest", "GalleryService"]
